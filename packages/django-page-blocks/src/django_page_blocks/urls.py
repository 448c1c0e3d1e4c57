"""URL configuration for django-page-blocks.

Provides:
- api_urlpatterns: JSON API endpoints (mount at /api/ or similar)
- page_urlpatterns: Public page view

Example usage in project urls.py:

    from django.urls import path, include

    from django_page_blocks.urls import api_urlpatterns, page_urlpatterns

    urlpatterns = [
        path("api/", include(api_urlpatterns)),
        path("", include(page_urlpatterns)),
    ]
"""

from django.urls import path

from .views import (
    BlockTypesAPIView,
    PageDocumentAPIView,
    PageEditAPIView,
    PageView,
    RenderedPageAPIView,
)


api_urlpatterns = [
    path("block-types/", BlockTypesAPIView.as_view(), name="page-blocks-block-types"),
    path("pages/<slug:page_key>/", PageDocumentAPIView.as_view(), name="page-blocks-document"),
    path(
        "pages/<slug:page_key>/rendered/",
        RenderedPageAPIView.as_view(),
        name="page-blocks-rendered",
    ),
    path("pages/<slug:page_key>/edit/", PageEditAPIView.as_view(), name="page-blocks-edit"),
]

page_urlpatterns = [
    path("pages/<slug:page_key>/", PageView.as_view(), name="page-blocks-page"),
]

urlpatterns = api_urlpatterns
