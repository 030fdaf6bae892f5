"""오버레이 상태 모델. 필드 이름은 저장 파일·웹소켓·API와 동일한 camelCase 별칭 사용."""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FONT = "'Kanit', sans-serif"
MIN_MAX_WIN = 1
STROKE_WIDTH_RANGE = (0, 12)


class OverlayState(BaseModel):
    """오버레이 카운터·스타일 스냅샷. 불변 객체, 변경은 StateStore를 통해서만."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_win: int = Field(10, alias="maxWin")
    current: int = 0
    theme: str = "theme-default"
    font: str = DEFAULT_FONT
    font_url: str = Field("", alias="fontUrl")
    show_bg: bool = Field(True, alias="showBg")
    stroke_width: Union[int, float] = Field(2, alias="strokeWidth")
    stroke_color: str = Field("#000000", alias="strokeColor")

    @field_validator("max_win")
    @classmethod
    def _clamp_max_win(cls, v: int) -> int:
        return max(MIN_MAX_WIN, v)

    @field_validator("stroke_width")
    @classmethod
    def _clamp_stroke_width(cls, v: Union[int, float]) -> Union[int, float]:
        lo, hi = STROKE_WIDTH_RANGE
        if v < lo:
            return lo
        if v > hi:
            return hi
        return v

    def to_dict(self) -> dict[str, Any]:
        """저장 파일/브로드캐스트에 쓰는 camelCase dict."""
        return self.model_dump(by_alias=True)


def _is_int(v: Any) -> bool:
    # bool은 int의 서브클래스라 따로 거른다. 5.0 같은 정수값 float 는 허용 (모델이 int 로 변환)
    if isinstance(v, float):
        return v.is_integer()
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _is_str(v: Any) -> bool:
    return isinstance(v, str)


def _is_label(v: Any) -> bool:
    return isinstance(v, str) and v != ""


def _is_bool(v: Any) -> bool:
    return isinstance(v, bool)


# 별칭 → 타입 검사. 검사를 통과한 값만 병합된다.
FIELD_CHECKS: dict[str, Callable[[Any], bool]] = {
    "maxWin": _is_int,
    "current": _is_int,
    "theme": _is_label,
    "font": _is_label,
    "fontUrl": _is_str,
    "showBg": _is_bool,
    "strokeWidth": _is_number,
    "strokeColor": _is_str,
}


def merge_partial(state: OverlayState, partial: Mapping[str, Any]) -> OverlayState:
    """
    부분 업데이트 병합. 빠졌거나 타입이 틀린 필드는 이전 값 유지(에러 아님).
    maxWin / strokeWidth 클램프는 모델 검증기에서 처리.
    """
    data = state.to_dict()
    for name, check in FIELD_CHECKS.items():
        if name in partial and check(partial[name]):
            data[name] = partial[name]
    return OverlayState.model_validate(data)
