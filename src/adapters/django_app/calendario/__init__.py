"""Adapter Django do domínio de Calendário (integrações e sincronização)."""
