"""movement package"""
