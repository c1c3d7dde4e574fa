"""
User handlers for the money tracker API.

Users live in Supabase Auth; this service keeps no user records of its own.
"""

from utils.decorators import lambda_handler, require_auth
from utils.responses import success_response


@lambda_handler()
@require_auth
def get_profile(event, context):
    """
    Return the authenticated user's identity.

    GET /api/users/profile
    """
    return success_response(data=event["auth"].to_dict())
