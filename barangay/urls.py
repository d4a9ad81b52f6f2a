from django.urls import include, path

urlpatterns = [
    path("api/identifiers/", include("identifiers.urls")),
]
