from django.urls import include, path

urlpatterns = [
    path("", include("route_optimizer.urls")),
]
