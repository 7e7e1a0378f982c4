"""
CourseHub Backend: Request/Response Schemas
==========================================

    common.py        response envelopes, pagination, health
    forum.py         posts, replies, likes, pins
    chat.py          messages, conversations, unread counters
    notification.py  notification feed
"""
