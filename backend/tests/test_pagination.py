"""
CourseHub Backend: Pagination Helper Tests
==========================================
"""

import pytest
from sqlalchemy.exc import OperationalError

from coursehub.exceptions import DatabaseError
from coursehub.models import ForumPost
from coursehub.services.pagination import escape_like, page_count, paginate, search_clause


class TestPageCount:

    @pytest.mark.parametrize(
        "total,limit,expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5)],
    )
    def test_ceil(self, total, limit, expected):
        assert page_count(total, limit) == expected


class TestSearch:

    def test_wildcards_escaped(self):
        assert escape_like("100%_done\\") == "100\\%\\_done\\\\"

    def test_blank_term_means_no_filter(self):
        assert search_clause(None, ForumPost.title) is None
        assert search_clause("   ", ForumPost.title) is None

    def test_clause_covers_every_column(self):
        clause = search_clause("exam", ForumPost.title, ForumPost.content)
        compiled = str(clause)
        assert "forum_posts.title" in compiled
        assert "forum_posts.content" in compiled


class TestPaginate:

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError) as exc_info:
            await paginate(mock_db_session, ForumPost, page=1, limit=10)
        assert exc_info.value.context == {"error_type": "OperationalError"}
