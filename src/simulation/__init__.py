"""simulation package"""
