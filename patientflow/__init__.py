"""Patient flow application for the clinic backend.

This package contains the models, flow engine, read services, views and
realtime consumer behind the front desk room board and provider queue.
"""
