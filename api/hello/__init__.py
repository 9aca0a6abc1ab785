"""
HelloWorld message feature: record store, HTTP handlers and their helpers.
"""
