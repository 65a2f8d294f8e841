"""
HTTP routers, one per report family
"""
