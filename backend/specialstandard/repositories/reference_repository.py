"""
SpecialStandard Backend — Reference Data Repository
====================================================

Districts, schools and newsletters are maintained outside the application
and only read here. These lists are small and are not paginated.
"""

import datetime as dt
from typing import List, Optional

from specialstandard.database import Database
from specialstandard.query import Comparison, FilterSet, RowMapper, build_select, collect_all, collect_one
from specialstandard.repositories.base import Repository
from specialstandard.schemas.reference import District, Newsletter, School

district_mapper = RowMapper(District, ["id", "name", "created_at", "updated_at"])
school_mapper = RowMapper(School, ["id", "name", "district_id", "created_at", "updated_at"])
newsletter_mapper = RowMapper(Newsletter, ["id", "start_date", "end_date", "s3_url"])


class DistrictRepository(Repository):
    resource_name = "district"

    async def list(self, db: Database) -> List[District]:
        query = build_select(
            "SELECT id, name, created_at, updated_at FROM district", None, "name ASC, id ASC", None
        )
        return collect_all(await self._fetch(db, query.sql, query.args), district_mapper)

    async def get(self, db: Database, district_id: int) -> District:
        row = await self._fetchrow(
            db, "SELECT id, name, created_at, updated_at FROM district WHERE id = $1", [district_id]
        )
        district = collect_one(row, district_mapper)
        if district is None:
            raise self._not_found(district_id)
        return district


class SchoolRepository(Repository):
    resource_name = "school"

    async def list(self, db: Database, district_id: Optional[int] = None) -> List[School]:
        filter_set = FilterSet.of([("district_id", Comparison.EQUALS, district_id)])
        query = build_select(
            "SELECT id, name, district_id, created_at, updated_at FROM school",
            filter_set,
            "name ASC, id ASC",
            None,
        )
        return collect_all(await self._fetch(db, query.sql, query.args), school_mapper)


class NewsletterRepository(Repository):
    resource_name = "newsletter"

    async def get_by_date(self, db: Database, date: dt.date) -> Newsletter:
        """The newsletter whose [start_date, end_date] window contains `date`."""
        row = await self._fetchrow(
            db,
            "SELECT id, start_date, end_date, s3_url\n"
            "FROM newsletter\n"
            "WHERE start_date <= $1 AND end_date >= $1\n"
            "ORDER BY start_date DESC\n"
            "LIMIT 1",
            [date],
        )
        newsletter = collect_one(row, newsletter_mapper)
        if newsletter is None:
            raise self._not_found(date.isoformat())
        return newsletter


district_repository = DistrictRepository()
school_repository = SchoolRepository()
newsletter_repository = NewsletterRepository()
