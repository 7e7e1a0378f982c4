"""
CourseHub Backend: Services Layer
=================================

What:  Business rules between the routes (HTTP) and the models (persistence).
How:   Stateless classes with a module-level singleton each. Every method
       takes the request's AsyncSession first and raises CourseHubError
       subclasses; the session is committed by get_db_session.

Service Inventory:
    - CourseService:       course lookup and membership checks
    - ForumService:        posts, replies, likes, pins, announcements
    - ChatService:         direct messages between course participants
    - NotificationService: notification fan-out and the per-user feed
    - pagination:          page/limit helper and literal text search
"""
