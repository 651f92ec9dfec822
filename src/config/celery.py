"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events de forma assíncrona
- Sincronização periódica de calendários externos
- Relatório diário de parcelas vencidas
- Notificações ao usuário

Arquitetura:
- Broker: RabbitMQ (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO

    # Iniciar beat (tarefas agendadas)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

# Definir módulo de settings do Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

HANDLERS = 'src.adapters.django_app.events.handlers'

# Criar aplicação Celery
app = Celery('hekate')

# Carregar configurações do Django (prefixo CELERY_)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    # Monitoramento
    worker_send_task_events=True,
    task_send_sent_event=True,
)

# Definir filas
app.conf.task_default_queue = 'default'
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
    Queue('calendar', Exchange('calendar'), routing_key='calendar.#'),
)

# Roteamento de tarefas para filas
app.conf.task_routes = {
    f'{HANDLERS}.notify_user': {'queue': 'notifications'},
    f'{HANDLERS}.sincronizar_calendarios': {'queue': 'calendar'},
    f'{HANDLERS}.limpar_eventos_antigos': {'queue': 'calendar'},
    f'{HANDLERS}.verificar_parcelas_vencidas': {'queue': 'default'},
    f'{HANDLERS}.*': {'queue': 'events'},
}

# Auto-descoberta: as tasks vivem em events/handlers.py
app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')

# Tarefas agendadas (beat)
app.conf.beat_schedule = {
    # Sincronização automática das integrações de calendário
    'sincronizar-calendarios': {
        'task': f'{HANDLERS}.sincronizar_calendarios',
        'schedule': float(os.environ.get('CALENDAR_SYNC_INTERVAL_SECONDS', 300)),
    },

    # Relatório diário de parcelas vencidas às 8h
    'marcar-parcelas-vencidas': {
        'task': f'{HANDLERS}.verificar_parcelas_vencidas',
        'schedule': crontab(hour=8, minute=0),
    },

    # Limpar eventos externos antigos semanalmente
    'limpar-eventos-antigos': {
        'task': f'{HANDLERS}.limpar_eventos_antigos',
        'schedule': crontab(hour=3, minute=0, day_of_week='sunday'),
    },
}
