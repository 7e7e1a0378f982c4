from coursehub.models.user import Course, User, UserRole, course_enrollments
from coursehub.models.forum import (
    ForumPost,
    ForumPostLike,
    ForumReply,
    ForumReplyLike,
    PostCategory,
    PostStatus,
)
from coursehub.models.chat import ChatMessage
from coursehub.models.notification import Notification, NotificationType

__all__ = [
    "User",
    "UserRole",
    "Course",
    "course_enrollments",
    "ForumPost",
    "ForumReply",
    "ForumPostLike",
    "ForumReplyLike",
    "PostCategory",
    "PostStatus",
    "ChatMessage",
    "Notification",
    "NotificationType",
]
