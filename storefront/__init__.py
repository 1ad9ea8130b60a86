"""Headless storefront server: session, persistent cart and checkout routes"""
