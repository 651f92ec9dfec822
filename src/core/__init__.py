"""
Domínio da plataforma Hekate em Python puro.

atendimentos (terapias, processos, financeiro), calendario (integrações e
fila de sincronização) e gamificacao (pontos e conquistas). Nada aqui
importa Django: persistência e mensageria chegam pelos ports.
"""
