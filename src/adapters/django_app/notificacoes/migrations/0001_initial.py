"""
Migration inicial de notificações.
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='NotificacaoModel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('usuario_id', models.CharField(db_index=True, max_length=100)),
                ('tipo', models.CharField(help_text='Ex: sync_success, payment_overdue', max_length=50)),
                ('titulo', models.CharField(max_length=200)),
                ('mensagem', models.TextField()),
                ('dados', models.JSONField(blank=True, default=dict)),
                ('prioridade', models.CharField(
                    choices=[('LOW', 'Baixa'), ('MEDIUM', 'Média'), ('HIGH', 'Alta'), ('URGENT', 'Urgente')],
                    default='MEDIUM',
                    max_length=10,
                )),
                ('lida', models.BooleanField(default=False)),
                ('lida_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Notificação',
                'verbose_name_plural': 'Notificações',
                'db_table': 'notifications',
                'ordering': ['-criado_em'],
                'indexes': [models.Index(fields=['usuario_id', 'lida'], name='notificacao_usuario_lida_idx')],
            },
        ),
    ]
