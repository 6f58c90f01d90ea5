"""
auth — User credential module.

Provides:
  • Password hashing (bcrypt, tunable work factor)
  • Signed, time-limited session tokens (HMAC-SHA256)
  • ``AuthService``: register / login / authenticate
  • Bearer-token guard and the ``require_identity`` FastAPI dependency
  • Register / Login API routes
"""
