from rest_framework import generics, permissions, viewsets, filters
from django.contrib.auth import get_user_model

from core.permissions import IsAdminRole
from .serializers import UserSerializer

User = get_user_model()


class UserProfileView(generics.RetrieveAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = UserSerializer

    def get_object(self):
        return self.request.user


class UserViewSet(viewsets.ModelViewSet):
    """
    CRUD for Admins to manage hospital staff accounts and roles.
    """
    queryset = User.objects.all().order_by('-date_joined')
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]
    filter_backends = [filters.SearchFilter]
    search_fields = ['username', 'email', 'role']

    def _save_with_password(self, serializer):
        password = serializer.validated_data.pop('password', None)
        user = serializer.save()
        if password:
            user.set_password(password)
            user.save(update_fields=['password'])

    def perform_create(self, serializer):
        self._save_with_password(serializer)

    def perform_update(self, serializer):
        self._save_with_password(serializer)
