from django.urls import include, path

from records_core.views import health

urlpatterns = [
    path("api/health/", health, name="health"),
    path("api/", include("records_core.urls")),
]
