"""Notificações in-app dos usuários."""
