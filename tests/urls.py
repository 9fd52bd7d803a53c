from django.urls import include, path

urlpatterns = [
    path("api/", include("health_share.urls")),
]
