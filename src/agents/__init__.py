"""agents package"""
