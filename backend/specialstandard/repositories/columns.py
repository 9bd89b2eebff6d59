"""Column lists shared by repositories that read the same records."""

SESSION_FIELDS = [
    "id", "session_name", "start_datetime", "end_datetime", "therapist_id",
    "notes", "location", "session_parent_id", "created_at", "updated_at",
]

STUDENT_FIELDS = [
    "id", "first_name", "last_name", "dob", "therapist_id", "school_id",
    "school_name", "district_id", "grade", "iep", "created_at", "updated_at",
]

RATINGS_JSON = (
    "json_agg(json_build_object("
    "'category', sr.category, 'level', sr.level, 'description', sr.description"
    ") ORDER BY sr.category)"
)


def session_columns(alias: str) -> str:
    return ", ".join(f"{alias}.{field}" for field in SESSION_FIELDS)


def student_columns(alias: str) -> str:
    """Student record columns read from `alias` joined with school `sch`."""
    return (
        f"{alias}.id, {alias}.first_name, {alias}.last_name, {alias}.dob, "
        f"{alias}.therapist_id, {alias}.school_id, sch.name, sch.district_id, "
        f"{alias}.grade, {alias}.iep, {alias}.created_at, {alias}.updated_at"
    )
