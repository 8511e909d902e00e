"""
Industry enrichment service.

Describes an OKVED 2 code as a sector name. Uses an OpenAI chat completion
when an API key is configured; any absence, timeout or error falls back to the
bundled OKVED 2 section table.
"""
import re
import threading
from collections import OrderedDict
from typing import Optional, Tuple

import structlog
from openai import OpenAI

from ratiolens.config import get_settings
from ratiolens.exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)

NO_INDUSTRY_DESCRIPTION = "Отрасль не указана в документах"

# OKVED 2 sections: (first division, last division, section letter, title)
OKVED_SECTIONS: Tuple[Tuple[int, int, str, str], ...] = (
    (1, 3, "A", "Сельское, лесное хозяйство, охота, рыболовство и рыбоводство"),
    (5, 9, "B", "Добыча полезных ископаемых"),
    (10, 33, "C", "Обрабатывающие производства"),
    (35, 35, "D", "Обеспечение электрической энергией, газом и паром; кондиционирование воздуха"),
    (36, 39, "E", "Водоснабжение; водоотведение, организация сбора и утилизации отходов, "
                  "деятельность по ликвидации загрязнений"),
    (41, 43, "F", "Строительство"),
    (45, 47, "G", "Торговля оптовая и розничная; ремонт автотранспортных средств и мотоциклов"),
    (49, 53, "H", "Транспортировка и хранение"),
    (55, 56, "I", "Деятельность гостиниц и предприятий общественного питания"),
    (58, 63, "J", "Деятельность в области информации и связи"),
    (64, 66, "K", "Деятельность финансовая и страховая"),
    (68, 68, "L", "Деятельность по операциям с недвижимым имуществом"),
    (69, 75, "M", "Деятельность профессиональная, научная и техническая"),
    (77, 82, "N", "Деятельность административная и сопутствующие дополнительные услуги"),
    (84, 84, "O", "Государственное управление и обеспечение военной безопасности; социальное обеспечение"),
    (85, 85, "P", "Образование"),
    (86, 88, "Q", "Деятельность в области здравоохранения и социальных услуг"),
    (90, 93, "R", "Деятельность в области культуры, спорта, организации досуга и развлечений"),
    (94, 96, "S", "Предоставление прочих видов услуг"),
    (97, 98, "T", "Деятельность домашних хозяйств как работодателей; недифференцированная деятельность "
                  "частных домашних хозяйств по производству товаров и оказанию услуг для собственного потребления"),
    (99, 99, "U", "Деятельность экстерриториальных организаций и органов"),
)

_DIVISION = re.compile(r"^\s*(\d{2})")


def okved_section(code: str) -> Optional[Tuple[str, str]]:
    """(section letter, title) of an OKVED 2 code, looked up by its division."""
    match = _DIVISION.match(code or "")
    if match is None:
        return None
    division = int(match.group(1))
    for first, last, letter, title in OKVED_SECTIONS:
        if first <= division <= last:
            return letter, title
    return None


def describe_okved_fallback(code: Optional[str]) -> str:
    """Offline sector description for an OKVED code."""
    if not code:
        return NO_INDUSTRY_DESCRIPTION
    section = okved_section(code)
    if section is None:
        return f"Отрасль по ОКВЭД {code}"
    letter, title = section
    return f"ОКВЭД {code} - {title} (раздел {letter})"


class IndustryService:
    """
    Sector description lookup for OKVED codes.

    The LLM answer is advisory: callers always receive a string, whichever
    path produced it.
    """

    SYSTEM_PROMPT = (
        "Вы эксперт по Общероссийскому классификатору видов экономической деятельности (ОКВЭД 2). "
        "Отвечайте точным названием вида деятельности без пояснений."
    )
    MAX_TOKENS = 100

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
        cache_size: Optional[int] = None,
    ):
        """
        Initialize industry service.

        Args:
            api_key: OpenAI API key (defaults to settings).
            model: Chat model name (defaults to settings).
            timeout: Request timeout in seconds (defaults to settings).
            client: Preconfigured OpenAI client.
            cache_size: Maximum cached answers (defaults to settings).
        """
        settings = get_settings()
        self._model = model or settings.openai_model
        self._timeout = timeout if timeout is not None else settings.industry_lookup_timeout_seconds
        self._client = client
        self._cache: "OrderedDict[str, str]" = OrderedDict()
        self._cache_size = cache_size if cache_size is not None else settings.industry_cache_size
        self._cache_lock = threading.Lock()

        key = api_key or settings.openai_api_key
        if self._client is None and key:
            self._client = OpenAI(api_key=key, timeout=self._timeout, max_retries=0)

        if self._client is None:
            logger.info("Industry lookup running with offline OKVED table only")

    @property
    def llm_enabled(self) -> bool:
        return self._client is not None

    def _build_prompt(self, code: str) -> str:
        return (
            f"Какой вид экономической деятельности соответствует коду ОКВЭД 2: {code}? "
            f'Формат ответа: "ОКВЭД {code} - [Название отрасли]"'
        )

    def describe(self, code: Optional[str]) -> str:
        """
        Describe the sector of an OKVED code.

        Args:
            code: OKVED code as extracted from the document (may be None).

        Returns:
            Sector description; never raises.
        """
        if not code:
            return NO_INDUSTRY_DESCRIPTION
        cached = self._cached(code)
        if cached is not None:
            return cached
        if self._client is None:
            return describe_okved_fallback(code)

        try:
            content = self._lookup(code)
        except ExternalServiceError as e:
            logger.warning("Industry lookup failed, using OKVED table", okved=code, error=e.message)
            return describe_okved_fallback(code)

        logger.info("Industry lookup complete", okved=code)
        self._remember(code, content)
        return content

    def _cached(self, code: str) -> Optional[str]:
        with self._cache_lock:
            content = self._cache.get(code)
            if content is not None:
                self._cache.move_to_end(code)
            return content

    def _remember(self, code: str, content: str) -> None:
        with self._cache_lock:
            self._cache[code] = content
            while len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)

    def _lookup(self, code: str) -> str:
        """
        Ask the chat model for the sector name.

        Raises:
            ExternalServiceError: The call failed or the answer was empty.
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(code)},
                ],
                max_tokens=self.MAX_TOKENS,
                timeout=self._timeout,
            )
        except Exception as e:
            raise ExternalServiceError("openai", message=str(e)) from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise ExternalServiceError("openai", message="empty answer")
        return content


# Singleton instance
_industry_service: Optional[IndustryService] = None


def get_industry_service() -> IndustryService:
    """Get singleton IndustryService instance."""
    global _industry_service
    if _industry_service is None:
        _industry_service = IndustryService()
    return _industry_service
