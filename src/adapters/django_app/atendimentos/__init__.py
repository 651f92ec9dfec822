"""Adapter Django do domínio de Atendimentos (terapias, processos, financeiro)."""
