"""
Error Message Utilities

Provides human-readable error messages for database constraint violations.
"""

import re

# Human-readable constraint explanations
CONSTRAINT_MESSAGES = {
    "posts_pkey": "A post with this ID already exists.",
    "users_pkey": "A user with this ID already exists.",
    "users_email_key": "A user with this email already exists.",
    "posts_user_id_fkey": "The post's author does not exist.",
    "check_title_length": "Title should be at least 5 characters.",
    "check_published_content": "Content should not be empty if published is true.",
}


def enhance_error_message(error: Exception) -> str:
    """
    Enhance database error messages with human-readable explanations.

    Handles:
    - Check constraint violations (adds explanation of the constraint)
    - Foreign key violations (explains the relationship)
    - Unique and not-null violations

    Returns the enhanced error message string.
    """
    error_str = str(error)

    constraint_match = re.search(r'violates check constraint "(\w+)"', error_str)
    if constraint_match:
        constraint_name = constraint_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(constraint_name)
        if explanation:
            return f"Constraint violation ({constraint_name}): {explanation}"
        return f"Constraint violation: {constraint_name}. {error_str}"

    fk_match = re.search(r'violates foreign key constraint "(\w+)"', error_str)
    if fk_match:
        constraint_name = fk_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(constraint_name, "The referenced record does not exist.")
        return f"Foreign key violation ({constraint_name}): {explanation} {error_str}"

    unique_match = re.search(r'duplicate key value violates unique constraint "(\w+)"', error_str)
    if unique_match:
        constraint_name = unique_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(constraint_name, "A record with this value already exists.")
        return f"Duplicate entry ({constraint_name}): {explanation}"

    null_match = re.search(r'null value in column "(\w+)" .* violates not-null constraint', error_str)
    if null_match:
        column_name = null_match.group(1)
        return f"Required field missing: '{column_name}' cannot be null."

    if not error_str:
        return type(error).__name__
    return error_str
