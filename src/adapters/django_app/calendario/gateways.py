"""
Clientes HTTP dos provedores de calendário.

Implementam o port CalendarClient sobre `httpx`:
- GoogleCalendarClient: Google Calendar API v3 (`updatedMin` incremental)
- OutlookCalendarClient: Microsoft Graph (`calendarView` em janela)

Antes de ler eventos o sincronizador troca o refresh token por um novo
access token (`renovar_token`) no endpoint OAuth do provedor.

Falhas HTTP, de rede ou respostas malformadas viram
CalendarProviderError; o sincronizador converte em resultado com erro.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging
import re

import httpx

from src.core.calendario.entities import (
    CalendarProviderError,
    EventoExterno,
    IntegracaoCalendario,
)
from src.core.shared.clock import agora

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_BASE_URL = "https://www.googleapis.com/calendar/v3"
MICROSOFT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GOOGLE_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
MICROSOFT_OAUTH_TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"

# Janela de leitura em torno de agora
JANELA_DIAS = 90

_FRACAO_LONGA = re.compile(r"(\.\d{6})\d+")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Converte datas dos provedores para datetime com fuso.

    Aceita "2024-05-01", "2024-05-01T10:00:00Z" e o formato do Graph
    com sete casas decimais ("2024-05-01T10:00:00.0000000"). Sem fuso,
    assume UTC.
    """
    if not value:
        return None
    texto = _FRACAO_LONGA.sub(r"\1", value.replace("Z", "+00:00"))
    resultado = datetime.fromisoformat(texto)
    if resultado.tzinfo is None:
        resultado = resultado.replace(tzinfo=timezone.utc)
    return resultado


def _iso_utc(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class _HttpCalendarClient:
    """Base comum: sessão httpx, autenticação Bearer e tradução de erros."""

    provider = ""

    def __init__(
        self,
        base_url: str,
        token_url: str = "",
        client_id: str = "",
        client_secret: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.transport = transport

    def _client(self, integracao: IntegracaoCalendario) -> httpx.Client:
        return httpx.Client(
            headers={"Authorization": f"Bearer {integracao.access_token}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    def _get_json(self, client: httpx.Client, url: str,
                  params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                mensagem = f"{self.provider}: token de acesso inválido ou expirado"
            else:
                mensagem = f"{self.provider} API error: {status}"
            raise CalendarProviderError(mensagem, provider=self.provider, status_code=status)
        except httpx.RequestError as e:
            raise CalendarProviderError(
                f"Falha de comunicação com {self.provider}: {e}",
                provider=self.provider,
            )
        except ValueError:
            raise CalendarProviderError(
                f"Resposta inválida de {self.provider}",
                provider=self.provider,
            )

    def renovar_token(self, integracao: IntegracaoCalendario) -> Tuple[str, Optional[str]]:
        """
        Troca o refresh token da integração por um novo access token.

        Returns:
            (access_token, refresh_token); refresh_token é None quando o
            provedor não o rotaciona

        Raises:
            CalendarProviderError: Token recusado, falha de rede ou
                resposta sem access_token
        """
        dados = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": integracao.refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.token_url, data=dados)
                response.raise_for_status()
                tokens = response.json()
            access_token = tokens["access_token"]
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise CalendarProviderError(
                f"{self.provider}: renovação de token recusada ({status})",
                provider=self.provider,
                status_code=status,
            )
        except httpx.RequestError as e:
            raise CalendarProviderError(
                f"Falha de comunicação com {self.provider}: {e}",
                provider=self.provider,
            )
        except (KeyError, TypeError, ValueError):
            raise CalendarProviderError(
                f"Resposta de token inválida de {self.provider}",
                provider=self.provider,
            )

        logger.info(f"{self.provider}: access token renovado para integração {integracao.id}")
        return access_token, tokens.get("refresh_token")

    def listar_eventos(
        self,
        integracao: IntegracaoCalendario,
        desde: Optional[datetime] = None,
    ) -> List[EventoExterno]:
        eventos = []
        with self._client(integracao) as client:
            for item in self._itens(client, integracao, desde):
                try:
                    eventos.append(self._parse_evento(item))
                except (KeyError, TypeError, ValueError) as e:
                    raise CalendarProviderError(
                        f"Evento inválido recebido de {self.provider}: {e}",
                        provider=self.provider,
                    )
        logger.info(
            f"{self.provider}: {len(eventos)} eventos lidos para integração {integracao.id}"
        )
        return eventos

    def _itens(self, client, integracao, desde) -> Iterator[Dict[str, Any]]:
        raise NotImplementedError

    def _parse_evento(self, item: Dict[str, Any]) -> EventoExterno:
        raise NotImplementedError


class GoogleCalendarClient(_HttpCalendarClient):
    provider = "GOOGLE"

    def __init__(self, base_url: str = GOOGLE_CALENDAR_BASE_URL,
                 token_url: str = GOOGLE_OAUTH_TOKEN_URL, **kwargs):
        super().__init__(base_url, token_url=token_url, **kwargs)

    def _itens(self, client, integracao, desde):
        referencia = agora()
        params: Dict[str, Any] = {
            "maxResults": 250,
            "singleEvents": "true",
            "timeMin": _iso_utc(referencia - timedelta(days=JANELA_DIAS)),
            "timeMax": _iso_utc(referencia + timedelta(days=JANELA_DIAS)),
        }
        if desde:
            params["updatedMin"] = _iso_utc(desde)
            params["showDeleted"] = "true"

        url = f"{self.base_url}/calendars/{integracao.calendario_id or 'primary'}/events"
        while True:
            data = self._get_json(client, url, params)
            yield from data.get("items", [])

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params = {**params, "pageToken": page_token}

    def _parse_evento(self, item):
        start = item.get("start", {})
        end = item.get("end", {})
        dia_inteiro = "date" in start

        return EventoExterno(
            id_externo=item["id"],
            titulo=item.get("summary", ""),
            descricao=item.get("description") or "",
            inicio=parse_datetime(start.get("date") if dia_inteiro else start.get("dateTime")),
            fim=parse_datetime(end.get("date") if dia_inteiro else end.get("dateTime")),
            dia_inteiro=dia_inteiro,
            local=item.get("location") or "",
            status=item.get("status", "confirmed"),
            atualizado_em=parse_datetime(item.get("updated")),
        )


class OutlookCalendarClient(_HttpCalendarClient):
    provider = "OUTLOOK"

    def __init__(self, base_url: str = MICROSOFT_GRAPH_BASE_URL,
                 token_url: str = MICROSOFT_OAUTH_TOKEN_URL, **kwargs):
        super().__init__(base_url, token_url=token_url, **kwargs)

    def _itens(self, client, integracao, desde):
        referencia = agora()
        params: Optional[Dict[str, Any]] = {
            "startDateTime": _iso_utc(referencia - timedelta(days=JANELA_DIAS)),
            "endDateTime": _iso_utc(referencia + timedelta(days=JANELA_DIAS)),
            "$top": 250,
            "$orderby": "start/dateTime",
        }
        calendario = integracao.calendario_id
        if not calendario or calendario == "primary":
            url = f"{self.base_url}/me/calendarView"
        else:
            url = f"{self.base_url}/me/calendars/{calendario}/calendarView"

        while url:
            data = self._get_json(client, url, params)
            for item in data.get("value", []):
                # calendarView não filtra por alteração; filtra localmente
                atualizado = parse_datetime(item.get("lastModifiedDateTime"))
                if desde and atualizado and atualizado < desde:
                    continue
                yield item

            # nextLink já carrega os parâmetros
            url = data.get("@odata.nextLink")
            params = None

    def _parse_evento(self, item):
        start = item.get("start") or {}
        end = item.get("end") or {}
        local = item.get("location") or {}

        return EventoExterno(
            id_externo=item["id"],
            titulo=item.get("subject") or "",
            descricao=item.get("bodyPreview") or "",
            inicio=parse_datetime(start.get("dateTime")),
            fim=parse_datetime(end.get("dateTime")),
            dia_inteiro=bool(item.get("isAllDay")),
            local=local.get("displayName") or "",
            status="cancelled" if item.get("isCancelled") else "confirmed",
            atualizado_em=parse_datetime(item.get("lastModifiedDateTime")),
        )
