"""
QuickNote - AWS Lambda Gateway Adapter
========================================

What:  Runs the service behind API Gateway (REST API v1 or HTTP API v2).
How:   events.py translates event envelopes, handler.py replays them through
       the FastAPI app, so both deployments share one request code path.
"""
