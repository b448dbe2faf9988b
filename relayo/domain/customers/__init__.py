"""Customers domain: workspace contacts identified by phone and/or email"""
