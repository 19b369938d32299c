"""Domain exceptions and the REST framework exception handler"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class PostingFailure(APIException):
    """Raised when an atomic purchase/sale/payment posting aborts.

    Nothing from the aborted posting is persisted: the enclosing
    ``transaction.atomic()`` block is rolled back before the response is built.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Posting failed; no changes were saved.'
    default_code = 'posting_failure'


class IntegrationFailure(APIException):
    """Raised when the AI insight call fails or returns unusable content"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Failed to generate insights'
    default_code = 'integration_failure'


def api_exception_handler(exc, context):
    """
    Render errors in the shape the frontend expects.

    - validation errors keep DRF's per-field dict
    - not found, posting and integration failures get a ``message`` key
    - anything unhandled is logged and returned as a generic 500
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        set_rollback()
        return Response({'message': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        return response

    if isinstance(exc, (NotFound, PostingFailure, IntegrationFailure)) or response.status_code == status.HTTP_404_NOT_FOUND:
        detail = response.data.get('detail', '') if isinstance(response.data, dict) else response.data
        response.data = {'message': str(detail)}

    return response
