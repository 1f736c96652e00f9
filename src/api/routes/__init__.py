"""
API Routes - HTTP endpoint handlers

Each area (led strip, animation, auth, system) gets its own router; they
are all included in the app by api.main.create_app().
"""
