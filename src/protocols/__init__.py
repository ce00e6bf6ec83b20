"""protocols package"""
