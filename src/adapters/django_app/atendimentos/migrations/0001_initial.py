"""
Migration inicial para o domínio de Atendimentos.

Cria as tabelas:
- terapias
- processos_terapeuticos, itens_orcamento, sessoes_terapeuticas
- sessoes_avulsas
- pedidos_terapeuticos, parcelas
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_SESSAO = [
    ('PENDING', 'Pendente'),
    ('COMPLETED', 'Realizada'),
    ('CANCELED', 'Cancelada'),
]
MODO_SESSAO = [
    ('IN_PERSON', 'Presencial'),
    ('DISTANCE', 'A distância'),
    ('ONLINE', 'Online'),
]
FORMA_PAGAMENTO = [
    ('PIX', 'Pix'),
    ('CARD_MERCADO_PAGO', 'Cartão (Mercado Pago)'),
    ('NUBANK', 'Nubank'),
]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: terapias
        # =================================================================
        migrations.CreateModel(
            name='TerapiaModel',
            fields=[
                ('id', models.CharField(editable=False, help_text='UUID da terapia',
                                        max_length=36, primary_key=True, serialize=False)),
                ('nome', models.CharField(db_index=True, max_length=200)),
                ('descricao', models.TextField(blank=True, default='')),
                ('valor', models.DecimalField(decimal_places=2, max_digits=12,
                                              help_text='Valor por unidade do orçamento')),
                ('valor_por_sessao', models.BooleanField(
                    default=False, help_text='Se verdadeiro, o valor é cobrado por sessão')),
                ('sessoes_padrao', models.PositiveIntegerField(default=1)),
                ('valor_sessao_avulsa', models.DecimalField(blank=True, decimal_places=2,
                                                            max_digits=12, null=True)),
                ('ativa', models.BooleanField(db_index=True, default=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Terapia',
                'verbose_name_plural': 'Terapias',
                'db_table': 'terapias',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: processos_terapeuticos
        # =================================================================
        migrations.CreateModel(
            name='ProcessoTerapeuticoModel',
            fields=[
                ('id', models.CharField(editable=False, help_text='UUID do processo',
                                        max_length=36, primary_key=True, serialize=False)),
                ('paciente_id', models.CharField(db_index=True, help_text='ID do usuário paciente',
                                                 max_length=100)),
                ('criado_por_id', models.CharField(blank=True, max_length=100, null=True)),
                ('status', models.CharField(
                    choices=[
                        ('IN_ANALYSIS', 'Em análise'),
                        ('IN_TREATMENT', 'Em tratamento'),
                        ('NOT_APPROVED', 'Não aprovado'),
                        ('CANCELED', 'Cancelado'),
                        ('FINISHED', 'Finalizado'),
                    ],
                    db_index=True,
                    default='IN_ANALYSIS',
                    max_length=20,
                )),
                ('observacoes', models.TextField(blank=True, default='')),
                ('iniciado_em', models.DateTimeField(blank=True, null=True)),
                ('finalizado_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Processo Terapêutico',
                'verbose_name_plural': 'Processos Terapêuticos',
                'db_table': 'processos_terapeuticos',
                'ordering': ['-criado_em'],
                'indexes': [models.Index(fields=['paciente_id', 'status'],
                                         name='processos_t_pacient_3c1f0a_idx')],
            },
        ),

        # =================================================================
        # Tabela: itens_orcamento
        # =================================================================
        migrations.CreateModel(
            name='ItemOrcamentoModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('terapia_id', models.CharField(db_index=True, max_length=36)),
                ('terapia_nome', models.CharField(help_text='Nome da terapia no momento do orçamento',
                                                  max_length=200)),
                ('valor_unitario', models.DecimalField(decimal_places=2, max_digits=12)),
                ('sessoes_por_unidade', models.PositiveIntegerField(default=1)),
                ('quantidade', models.PositiveIntegerField(default=1)),
                ('desconto', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('ordem', models.PositiveIntegerField(default=0)),
                ('processo', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='itens',
                    to='atendimentos.processoterapeuticomodel',
                )),
            ],
            options={
                'verbose_name': 'Item de Orçamento',
                'verbose_name_plural': 'Itens de Orçamento',
                'db_table': 'itens_orcamento',
                'ordering': ['ordem'],
            },
        ),

        # =================================================================
        # Tabela: sessoes_terapeuticas
        # =================================================================
        migrations.CreateModel(
            name='SessaoTerapeuticaModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('item_orcamento_id', models.CharField(max_length=36)),
                ('terapia_id', models.CharField(max_length=36)),
                ('numero_sessao', models.PositiveIntegerField()),
                ('indice_ordem', models.PositiveIntegerField()),
                ('status', models.CharField(choices=STATUS_SESSAO, default='PENDING', max_length=20)),
                ('modo', models.CharField(blank=True, choices=MODO_SESSAO, max_length=20, null=True)),
                ('terapeuta_id', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('data_sessao', models.DateTimeField(blank=True, null=True)),
                ('comentarios', models.TextField(blank=True, default='')),
                ('concluida_em', models.DateTimeField(blank=True, null=True)),
                ('processo', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='sessoes',
                    to='atendimentos.processoterapeuticomodel',
                )),
            ],
            options={
                'verbose_name': 'Sessão Terapêutica',
                'verbose_name_plural': 'Sessões Terapêuticas',
                'db_table': 'sessoes_terapeuticas',
                'ordering': ['indice_ordem'],
            },
        ),

        # =================================================================
        # Tabela: sessoes_avulsas
        # =================================================================
        migrations.CreateModel(
            name='SessaoAvulsaModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('paciente_id', models.CharField(db_index=True, max_length=100)),
                ('terapia_id', models.CharField(max_length=36)),
                ('terapia_nome', models.CharField(max_length=200)),
                ('terapia_valor', models.DecimalField(decimal_places=2, max_digits=12)),
                ('terapeuta_id', models.CharField(blank=True, max_length=100, null=True)),
                ('data_sessao', models.DateTimeField(db_index=True)),
                ('modo', models.CharField(blank=True, choices=MODO_SESSAO, max_length=20, null=True)),
                ('status', models.CharField(choices=STATUS_SESSAO, default='COMPLETED', max_length=20)),
                ('comentarios', models.TextField(blank=True, null=True)),
                ('dados_sessao', models.TextField(blank=True, null=True)),
                ('valor_cobrado', models.DecimalField(decimal_places=2, max_digits=12)),
                ('criado_por_id', models.CharField(blank=True, max_length=100, null=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Sessão Avulsa',
                'verbose_name_plural': 'Sessões Avulsas',
                'db_table': 'sessoes_avulsas',
                'ordering': ['-data_sessao'],
            },
        ),

        # =================================================================
        # Tabela: pedidos_terapeuticos
        # =================================================================
        migrations.CreateModel(
            name='PedidoTerapeuticoModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('paciente_id', models.CharField(db_index=True, max_length=100)),
                ('status', models.CharField(
                    choices=[
                        ('OPEN', 'Em aberto'),
                        ('PARTIALLY_PAID', 'Parcialmente pago'),
                        ('PAID', 'Pago'),
                        ('CANCELED', 'Cancelado'),
                    ],
                    db_index=True,
                    default='OPEN',
                    max_length=20,
                )),
                ('forma_pagamento', models.CharField(choices=FORMA_PAGAMENTO, max_length=30)),
                ('modo_vencimento', models.CharField(
                    choices=[('AUTOMATIC_MONTHLY', 'Mensal automático'), ('MANUAL', 'Manual')],
                    max_length=30,
                )),
                ('quantidade_parcelas', models.PositiveIntegerField(default=1)),
                ('primeiro_vencimento', models.DateField(blank=True, null=True)),
                ('valor_total', models.DecimalField(decimal_places=2, max_digits=12)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('processo', models.OneToOneField(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='pedido',
                    to='atendimentos.processoterapeuticomodel',
                )),
                ('sessao_avulsa', models.OneToOneField(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='pedido',
                    to='atendimentos.sessaoavulsamodel',
                )),
            ],
            options={
                'verbose_name': 'Pedido Terapêutico',
                'verbose_name_plural': 'Pedidos Terapêuticos',
                'db_table': 'pedidos_terapeuticos',
                'ordering': ['criado_em'],
            },
        ),

        # =================================================================
        # Tabela: parcelas
        # =================================================================
        migrations.CreateModel(
            name='ParcelaModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('numero', models.PositiveIntegerField()),
                ('valor', models.DecimalField(decimal_places=2, max_digits=12)),
                ('valor_pago', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('vencimento', models.DateField(blank=True, db_index=True, null=True)),
                ('status', models.CharField(
                    choices=[('OPEN', 'Em aberto'), ('PAID', 'Paga'), ('CANCELED', 'Cancelada')],
                    db_index=True,
                    default='OPEN',
                    max_length=20,
                )),
                ('pago_em', models.DateTimeField(blank=True, null=True)),
                ('forma_pagamento', models.CharField(blank=True, choices=FORMA_PAGAMENTO,
                                                     max_length=30, null=True)),
                ('pedido', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='parcelas',
                    to='atendimentos.pedidoterapeuticomodel',
                )),
            ],
            options={
                'verbose_name': 'Parcela',
                'verbose_name_plural': 'Parcelas',
                'db_table': 'parcelas',
                'ordering': ['numero'],
                'indexes': [models.Index(fields=['status', 'vencimento'],
                                         name='parcelas_status_8d2e41_idx')],
                'constraints': [models.UniqueConstraint(fields=('pedido', 'numero'),
                                                        name='parcela_numero_unico')],
            },
        ),
    ]
