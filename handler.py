"""
AWS Lambda handler — Mangum wrapper for the ThreatScope API.

Lifespan stays on so every scoring profile is built, and validated, on cold start.
"""

from mangum import Mangum

from threatscope.main import app

handler = Mangum(app, lifespan="auto")
