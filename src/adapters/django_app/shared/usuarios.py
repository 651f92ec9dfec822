"""
Diretório de usuários sobre `django.contrib.auth`.

Terapeutas são usuários do grupo `settings.THERAPIST_GROUP_NAME`.
"""

from django.conf import settings
from django.contrib.auth import get_user_model


class DjangoDiretorioUsuarios:
    """Implementa DiretorioUsuarios consultando o model de usuário."""

    def _usuarios(self, usuario_id: str):
        User = get_user_model()
        try:
            return User.objects.filter(pk=usuario_id, is_active=True)
        except (TypeError, ValueError):
            return User.objects.none()

    def existe(self, usuario_id: str) -> bool:
        if not usuario_id:
            return False
        return self._usuarios(usuario_id).exists()

    def e_terapeuta(self, usuario_id: str) -> bool:
        if not usuario_id:
            return False
        grupo = getattr(settings, 'THERAPIST_GROUP_NAME', 'Terapeutas')
        return self._usuarios(usuario_id).filter(groups__name=grupo).exists()
