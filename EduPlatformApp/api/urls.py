from django.urls import path, include
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from EduPlatformApp.api.views import (
    WorkViewSet,
    GroupViewSet,
    AssignmentViewSet,
    SubmissionViewSet,
    EvaluationViewSet,
    StatsViewSet,
)

router = routers.SimpleRouter()
router.register(r"works", WorkViewSet, basename="work")
router.register(r"assignments", AssignmentViewSet, basename="assignment")
router.register(r"submissions", SubmissionViewSet, basename="submission")
router.register(r"evaluations", EvaluationViewSet, basename="evaluation")
router.register(r"stats", StatsViewSet, basename="stats")

works_router = routers.NestedSimpleRouter(router, r"works", lookup="work")
works_router.register(r"groups", GroupViewSet, basename="work-groups")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("", include(router.urls)),
    path("", include(works_router.urls)),
]
