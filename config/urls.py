from django.urls import include, path

urlpatterns = [
    path("console/", include("riderapp.urls")),
]
