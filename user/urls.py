from django.urls import path
from .adapters.viewsets import auth_viewset

urlpatterns = [
    # Exchange a Google ID token for the session cookie
    path('google-login', auth_viewset.AuthViewSet.as_view({'post': 'login_with_google'}), name='google_login'),
    # Caller's own profile
    path('profile', auth_viewset.SessionViewSet.as_view({'get': 'profile'}), name='profile'),
    # Clear the session cookie
    path('logout', auth_viewset.SessionViewSet.as_view({'post': 'logout'}), name='logout'),
]
