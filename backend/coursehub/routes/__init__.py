"""
CourseHub Backend: API Routes Package
=====================================

Route Inventory:
    - forum.py:          /api/forum/...          posts, replies, likes, pins, announcements
    - chat.py:           /api/chat/...           course-scoped direct messages
    - notifications.py:  /api/notifications/...  the caller's notification feed
    - health.py:         GET /health             service health check

Routes stay thin: authenticate, validate input, call a service, wrap the
result in an envelope. Authorization rules live in the services.
"""
