"""
auth — User accounts and sessions.

Provides:
  • Password hashing (bcrypt)
  • Access / refresh token issuing & verification
  • ``SessionManager`` — register / login / logout
  • Register / Login / Logout / Me API routes
"""
