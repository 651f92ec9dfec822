#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Cria banco de dados SQLite
3. Executa migrations
4. Cria o grupo de terapeutas
5. Cria terapias de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
"""

import os
import sys
import argparse

# Adicionar raiz do projeto ao path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


SAMPLE_THERAPIES = [
    {
        'nome': 'Reiki',
        'descricao': 'Terapia energética com imposição de mãos.',
        'valor': '150.00',
        'valor_por_sessao': True,
        'sessoes_padrao': 1,
        'valor_sessao_avulsa': '170.00',
    },
    {
        'nome': 'Constelação Familiar',
        'descricao': 'Pacote de acompanhamento sistêmico.',
        'valor': '900.00',
        'valor_por_sessao': False,
        'sessoes_padrao': 6,
        'valor_sessao_avulsa': '180.00',
    },
    {
        'nome': 'Mesa Radiônica',
        'descricao': 'Atendimento à distância ou presencial.',
        'valor': '200.00',
        'valor_por_sessao': True,
        'sessoes_padrao': 1,
    },
]


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    # URL não-PostgreSQL: settings cai no SQLite local
    os.environ['DATABASE_URL'] = 'sqlite:///db.sqlite3'

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_therapist_group():
    """Garante o grupo usado para identificar terapeutas."""
    from django.conf import settings
    from django.contrib.auth.models import Group

    _, created = Group.objects.get_or_create(name=settings.THERAPIST_GROUP_NAME)
    status = "criado" if created else "já existe"
    print(f"👥 Grupo '{settings.THERAPIST_GROUP_NAME}' {status}")


def create_sample_data():
    """Cria terapias de exemplo."""
    from src.core.atendimentos.entities import Terapia
    from src.adapters.django_app.atendimentos.repositories import DjangoTerapiaRepository

    repo = DjangoTerapiaRepository()
    existentes = {t.nome for t in repo.list_all()}

    print("📝 Criando terapias de exemplo...")

    criadas = 0
    for dados in SAMPLE_THERAPIES:
        if dados['nome'] in existentes:
            continue
        terapia = Terapia.criar(**dados)
        repo.save(terapia)
        criadas += 1
        print(f"   ✓ {terapia.nome} (R$ {terapia.valor})")

    print(f"✅ {criadas} terapia(s) criada(s)!")


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except Exception as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Debug Mode: {settings.DEBUG}")
    print(f"  Event Publisher: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. python manage.py createsuperuser")
    print("   2. python manage.py runserver")
    print("   3. Acesse: http://localhost:8000/admin/")
    print("   4. Acesse: http://localhost:8000/api/atendimentos/terapias/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar terapias de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Hekate - Quick Setup")
    print("=" * 60 + "\n")

    # Configurar Django
    setup_django()

    if args.check_only:
        check_connection()
        return

    # Verificar conexão
    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        return

    run_migrations()
    create_therapist_group()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
