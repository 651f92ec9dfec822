"""
Migration inicial para Gamificação.

Cria as tabelas:
- user_points
- point_transactions
- user_achievements
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='PontosUsuarioModel',
            fields=[
                ('usuario_id', models.CharField(max_length=100, primary_key=True, serialize=False)),
                ('total_pontos', models.PositiveIntegerField(db_index=True, default=0)),
                ('nivel', models.PositiveIntegerField(default=1)),
                ('progresso', models.PositiveIntegerField(default=0)),
                ('pontos_proximo_nivel', models.PositiveIntegerField(default=100)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Pontuação',
                'verbose_name_plural': 'Pontuações',
                'db_table': 'user_points',
                'ordering': ['-total_pontos'],
            },
        ),
        migrations.CreateModel(
            name='TransacaoPontosModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('usuario_id', models.CharField(db_index=True, max_length=100)),
                ('tipo', models.CharField(
                    choices=[('EARNED', 'Ganho'), ('BONUS', 'Bônus'), ('SPENT', 'Gasto')],
                    max_length=10,
                )),
                ('pontos', models.IntegerField()),
                ('motivo', models.CharField(max_length=255)),
                ('descricao', models.TextField(blank=True, default='')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('criado_em', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Transação de Pontos',
                'verbose_name_plural': 'Transações de Pontos',
                'db_table': 'point_transactions',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='ConquistaUsuarioModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('usuario_id', models.CharField(db_index=True, max_length=100)),
                ('codigo', models.CharField(max_length=50)),
                ('nome', models.CharField(max_length=200)),
                ('categoria', models.CharField(
                    choices=[
                        ('POINTS_MILESTONE', 'Marco de pontos'),
                        ('LEVEL_MILESTONE', 'Marco de nível'),
                    ],
                    max_length=20,
                )),
                ('raridade', models.CharField(max_length=20)),
                ('bonus', models.PositiveIntegerField(default=0)),
                ('desbloqueada_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Conquista',
                'verbose_name_plural': 'Conquistas',
                'db_table': 'user_achievements',
                'ordering': ['desbloqueada_em'],
                'constraints': [models.UniqueConstraint(fields=('usuario_id', 'codigo'),
                                                        name='conquista_unica_por_usuario')],
            },
        ),
    ]
