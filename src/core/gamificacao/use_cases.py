"""
Use Cases do Domínio de Gamificação.

- ConcederPontosService: lança pontos, recalcula nível e desbloqueia marcos
- PontuarAcaoService: pontos pela tabela de ações (ex: ORDER_PAID)
- EstatisticasUsuarioService: resumo do usuário
- RankingService: maiores pontuações
"""

from typing import Any, Dict, List, Optional
import logging

from src.core.shared.interfaces import UnitOfWork

from .entities import (
    CategoriaConquista,
    ConquistaUsuario,
    PontosUsuario,
    TipoTransacao,
    TransacaoPontos,
    validar_concessao,
)
from .events import ConquistaDesbloqueadaEvent, PontosConcedidosEvent
from .ports import ConquistaRepository, PontosRepository, TransacaoRepository
from .pontuacao import Marco, PointSettings

logger = logging.getLogger(__name__)


class ConcederPontosService:
    """
    Use Case: Conceder pontos a um usuário.

    Fluxo:
    1. Validar pontos (> 0) e motivo
    2. Somar ao total e recalcular nível
    3. Registrar transação EARNED
    4. Desbloquear marcos de pontos (sempre) e de nível (se subiu)
    5. Bônus de conquista vira transação BONUS; não dispara novos marcos

    Com `unico_por`, a chave de `metadata` indicada identifica a concessão:
    se já existe transação EARNED com o mesmo motivo e valor, nada é
    lançado e o retorno é None (reentrega de evento, pedido quitado de novo).
    """

    def __init__(
        self,
        pontos_repo: PontosRepository,
        transacao_repo: TransacaoRepository,
        conquista_repo: ConquistaRepository,
        uow: UnitOfWork,
        point_settings: Optional[PointSettings] = None,
    ):
        self.pontos_repo = pontos_repo
        self.transacao_repo = transacao_repo
        self.conquista_repo = conquista_repo
        self.uow = uow
        self.point_settings = point_settings or PointSettings()

    def execute(
        self,
        usuario_id: str,
        pontos: Any,
        motivo: str,
        descricao: str = "",
        metadata: Optional[Dict[str, Any]] = None,
        unico_por: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        pontos = validar_concessao(pontos, motivo)
        usuario_id = str(usuario_id)
        metadata = metadata or {}

        with self.uow:
            # Leitura do saldo trava a linha do usuário antes da checagem
            saldo = self.pontos_repo.get(usuario_id) or PontosUsuario(usuario_id=usuario_id)
            if unico_por and self.transacao_repo.existe(
                usuario_id, motivo, unico_por, metadata.get(unico_por)
            ):
                logger.info(
                    f"Pontos de {motivo} já concedidos a {usuario_id} "
                    f"({unico_por}={metadata.get(unico_por)}); ignorando"
                )
                return None

            subiu_nivel = saldo.adicionar(pontos)
            self.transacao_repo.add(
                TransacaoPontos(
                    usuario_id=usuario_id,
                    tipo=TipoTransacao.EARNED,
                    pontos=pontos,
                    motivo=motivo,
                    descricao=descricao,
                    metadata=metadata,
                )
            )

            desbloqueadas = self._desbloquear(
                saldo,
                CategoriaConquista.POINTS_MILESTONE,
                self.point_settings.marcos_de_pontos_atingidos(saldo.total_pontos),
            )
            if subiu_nivel:
                desbloqueadas += self._desbloquear(
                    saldo,
                    CategoriaConquista.LEVEL_MILESTONE,
                    self.point_settings.marcos_de_nivel_atingidos(saldo.nivel),
                )

            self.pontos_repo.save(saldo)
            self.uow.publish_event(
                PontosConcedidosEvent(
                    aggregate_id=usuario_id,
                    pontos=pontos,
                    motivo=motivo,
                    total_pontos=saldo.total_pontos,
                    nivel=saldo.nivel,
                )
            )

        logger.info(
            f"{pontos} pontos concedidos a {usuario_id} ({motivo}); "
            f"total={saldo.total_pontos} nível={saldo.nivel}"
        )
        return {
            **saldo.to_dict(),
            "points_awarded": pontos,
            "leveled_up": subiu_nivel,
            "achievements_unlocked": [c.to_dict() for c in desbloqueadas],
        }

    def _desbloquear(
        self,
        saldo: PontosUsuario,
        categoria: CategoriaConquista,
        marcos: List[Marco],
    ) -> List[ConquistaUsuario]:
        existentes = self.conquista_repo.codigos_do_usuario(saldo.usuario_id)
        novas = []
        for marco in marcos:
            codigo = ConquistaUsuario.codigo_para(categoria, marco.limite)
            if codigo in existentes:
                continue

            conquista = ConquistaUsuario(
                usuario_id=saldo.usuario_id,
                codigo=codigo,
                nome=marco.nome,
                categoria=categoria,
                raridade=marco.raridade,
                bonus=marco.bonus,
            )
            self.conquista_repo.add(conquista)
            existentes.add(codigo)
            novas.append(conquista)

            if marco.bonus > 0:
                saldo.adicionar(marco.bonus)
                self.transacao_repo.add(
                    TransacaoPontos(
                        usuario_id=saldo.usuario_id,
                        tipo=TipoTransacao.BONUS,
                        pontos=marco.bonus,
                        motivo="Achievement bonus",
                        descricao=f"Bônus por conquista: {marco.nome}",
                        metadata={"achievement": codigo},
                    )
                )

            self.uow.publish_event(
                ConquistaDesbloqueadaEvent(
                    aggregate_id=saldo.usuario_id,
                    codigo=codigo,
                    nome=marco.nome,
                    bonus=marco.bonus,
                )
            )
        return novas


class PontuarAcaoService:
    """
    Concede os pontos configurados para uma ação do sistema.

    Ações ligadas a um pedido (`order_id` em metadata) pontuam uma única
    vez por pedido.
    """

    def __init__(self, conceder: ConcederPontosService, point_settings: PointSettings):
        self.conceder = conceder
        self.point_settings = point_settings

    def execute(
        self,
        usuario_id: str,
        acao: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        pontos = self.point_settings.pontos_da_acao(acao)
        if pontos <= 0:
            logger.debug(f"Ação {acao} sem pontuação configurada")
            return None
        metadata = metadata or {}
        return self.conceder.execute(
            usuario_id,
            pontos,
            motivo=acao,
            metadata=metadata,
            unico_por="order_id" if metadata.get("order_id") else None,
        )


class EstatisticasUsuarioService:
    def __init__(
        self,
        pontos_repo: PontosRepository,
        transacao_repo: TransacaoRepository,
        conquista_repo: ConquistaRepository,
    ):
        self.pontos_repo = pontos_repo
        self.transacao_repo = transacao_repo
        self.conquista_repo = conquista_repo

    def execute(self, usuario_id: str, limite_transacoes: int = 10) -> Dict[str, Any]:
        usuario_id = str(usuario_id)
        saldo = self.pontos_repo.get(usuario_id) or PontosUsuario(usuario_id=usuario_id)
        return {
            **saldo.to_dict(),
            "recent_transactions": [
                t.to_dict() for t in self.transacao_repo.recentes(usuario_id, limite_transacoes)
            ],
            "achievements": [c.to_dict() for c in self.conquista_repo.list_by_usuario(usuario_id)],
        }


class RankingService:
    def __init__(self, pontos_repo: PontosRepository):
        self.pontos_repo = pontos_repo

    def execute(self, limite: int = 10) -> List[Dict[str, Any]]:
        limite = max(1, min(int(limite), 100))
        return [
            {"position": posicao, **saldo.to_dict()}
            for posicao, saldo in enumerate(self.pontos_repo.ranking(limite), start=1)
        ]
