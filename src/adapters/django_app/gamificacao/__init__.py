"""Adapter Django do domínio de Gamificação (pontos, níveis e conquistas)."""
