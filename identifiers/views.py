"""
API Layer — Identifier Allocation Endpoints (Django REST Framework)

Thin controllers: input validation and type coercion, delegation to the
application use case, and explicit translation of domain exceptions into
HTTP responses (400 invalid input, 409 exhausted sequence, 503 store
failure). No allocation logic lives here.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from identifiers.application.use_cases import (
    allocate_identifier,
    current_period,
    default_allocator,
)
from identifiers.conf import identifier_settings
from identifiers.domain.exceptions import (
    AllocationError,
    InvalidNamespaceError,
    InvalidPeriodError,
    MalformedIdentifierError,
    SequenceOverflowError,
)
from identifiers.domain.formatting import (
    max_sequence_for,
    normalize_namespace,
    parse_identifier,
)
from identifiers.models import IssuedIdentifier


def _coerce_period(value):
    """Integer period from JSON or form input, or None when it is not a whole number."""
    # JSON true/false would otherwise pass as 1/0.
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class AllocateIdentifierView(APIView):
    """
    POST /api/identifiers/allocate/

    Accepts ``namespace`` (or the legacy ``purokOrPosition``) and an optional
    ``period``; the period defaults to the current calendar year.
    """

    def post(self, request):
        namespace = request.data.get("namespace") or request.data.get("purokOrPosition")
        period = request.data.get("period")

        if not namespace:
            return Response(
                {"error": "namespace is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if period is None or period == "":
            period = current_period()
        else:
            period = _coerce_period(period)
            if period is None:
                return Response(
                    {"error": "period must be an integer."},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        try:
            identifier = allocate_identifier(namespace, period)
        except (InvalidNamespaceError, InvalidPeriodError) as exc:
            return Response(
                {"error": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except SequenceOverflowError as exc:
            return Response(
                {"error": str(exc)},
                status=status.HTTP_409_CONFLICT,
            )
        except AllocationError as exc:
            return Response(
                {"error": str(exc)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        parts = parse_identifier(identifier, width=identifier_settings()["SEQUENCE_WIDTH"])
        return Response(
            {
                "identifier": identifier,
                "idNumber": identifier,
                "namespace": parts.namespace_key,
                "period": parts.period,
                "sequence": parts.sequence,
            },
            status=status.HTTP_201_CREATED,
        )


class SequenceStatusView(APIView):
    """GET /api/identifiers/sequences/<namespace>/<period>/"""

    def get(self, request, namespace, period):
        allocator = default_allocator()
        try:
            namespace_key = normalize_namespace(namespace)
            last_sequence = allocator.current_sequence(namespace_key, period)
        except (InvalidNamespaceError, InvalidPeriodError) as exc:
            return Response(
                {"error": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        max_sequence = max_sequence_for(allocator.width)
        return Response(
            {
                "namespace": namespace_key,
                "period": period,
                "last_sequence": last_sequence,
                "remaining": max(max_sequence - last_sequence, 0),
            },
            status=status.HTTP_200_OK,
        )


class IssuedIdentifierView(APIView):
    """GET /api/identifiers/issued/<identifier>/"""

    def get(self, request, identifier):
        try:
            parts = parse_identifier(identifier, width=identifier_settings()["SEQUENCE_WIDTH"])
        except MalformedIdentifierError as exc:
            return Response(
                {"error": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        issued = IssuedIdentifier.objects.filter(value=identifier).first()
        if issued is None:
            return Response(
                {"error": "Identifier not issued."},
                status=status.HTTP_404_NOT_FOUND,
            )

        return Response(
            {
                "identifier": issued.value,
                "namespace": parts.namespace_key,
                "period": parts.period,
                "sequence": parts.sequence,
                "created_at": issued.created_at.isoformat(),
            },
            status=status.HTTP_200_OK,
        )
