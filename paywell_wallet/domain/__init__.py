"""
Domain layer: exceptions and record helpers.
"""
