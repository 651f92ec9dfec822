"""
Configurações globais do Pytest para a plataforma Hekate.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas:
- Django configurado com SQLite em memória
- Publisher de eventos síncrono (sem broker)
- Container DI limpo a cada teste
"""

import sys
from pathlib import Path

import pytest

# Adicionar raiz do projeto ao path para imports `src.*`
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configura Django antes da coleta dos testes."""
    import django
    from django.conf import settings

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.auth',
                'django.contrib.contenttypes',
                'django.contrib.sessions',
                'django.contrib.messages',
                'src.adapters.django_app.atendimentos',
                'src.adapters.django_app.calendario',
                'src.adapters.django_app.gamificacao',
                'src.adapters.django_app.notificacoes',
            ],
            MIDDLEWARE=[
                'django.contrib.sessions.middleware.SessionMiddleware',
                'django.contrib.auth.middleware.AuthenticationMiddleware',
                'django.contrib.messages.middleware.MessageMiddleware',
            ],
            TEMPLATES=[{
                'BACKEND': 'django.template.backends.django.DjangoTemplates',
                'DIRS': [],
                'APP_DIRS': True,
                'OPTIONS': {
                    'context_processors': [
                        'django.template.context_processors.request',
                        'django.contrib.auth.context_processors.auth',
                        'django.contrib.messages.context_processors.messages',
                    ],
                },
            }],
            ROOT_URLCONF='src.config.urls',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'],
            EVENT_PUBLISHER_MODE='sync',
            THERAPIST_GROUP_NAME='terapeutas',
            CALENDAR_EVENT_RETENTION_DAYS=90,
            GAMIFICATION_POINTS={'ORDER_PAID': 30},
            CELERY_BROKER_URL='memory://',
            CELERY_RESULT_BACKEND='cache+memory://',
            CELERY_TASK_ALWAYS_EAGER=True,
        )
        django.setup()


@pytest.fixture(autouse=True)
def reset_container():
    """
    Reset do container DI entre testes.

    Garante que singletons (fila de sincronização, publisher) não
    vazem estado de um teste para outro.
    """
    from src.config.container import reset_container as _reset

    _reset()
    yield
    _reset()
