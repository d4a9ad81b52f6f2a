from django.urls import path
from .views import AllocateIdentifierView, IssuedIdentifierView, SequenceStatusView

urlpatterns = [
    path("allocate/", AllocateIdentifierView.as_view(), name="allocate-identifier"),
    path("sequences/<str:namespace>/<int:period>/", SequenceStatusView.as_view(), name="sequence-status"),
    path("issued/<str:identifier>/", IssuedIdentifierView.as_view(), name="issued-identifier"),
]
