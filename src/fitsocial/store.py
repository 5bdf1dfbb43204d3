"""인메모리 저장소 모듈: 원격 데이터베이스 서비스를 대신하는 테이블 저장소

실제 앱에서는 호스팅된 데이터베이스의 조회/삽입/수정 API를 사용합니다.
이 모듈은 같은 형태의 호출(등호 필터, IN 필터, 정렬, 개수 제한)을
메모리 위에서 흉내 내어 데모와 테스트에서 사용합니다.
"""
from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Iterable, List, Mapping, Optional


class StoreError(RuntimeError):
    """저장소 조회/쓰기 실패"""


class InMemoryStore:
    """
    테이블 이름 -> 행 목록 형태의 인메모리 저장소

    조회 결과는 복사본이므로 호출 측에서 수정해도 저장소에 반영되지 않습니다.
    """

    def __init__(self, tables: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None) -> None:
        self._tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }

    def select(
        self,
        table: str,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        in_: Optional[Mapping[str, Iterable[Any]]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        조건에 맞는 행을 조회하는 함수

        Args:
            table: 테이블 이름
            eq: 필드 -> 값 (모두 일치해야 함)
            in_: 필드 -> 허용 값 목록
            order_by: 정렬 기준 필드 (값이 없는 행은 맨 뒤)
            descending: 내림차순 정렬 여부
            limit: 최대 행 수

        Returns:
            조건에 맞는 행 목록 (복사본)

        Raises:
            StoreError: 존재하지 않는 테이블
        """
        rows = self._table(table)
        eq = eq or {}
        in_sets = {field: set(values) for field, values in (in_ or {}).items()}

        matches = [
            row for row in rows
            if all(row.get(field) == value for field, value in eq.items())
            and all(row.get(field) in allowed for field, allowed in in_sets.items())
        ]

        if order_by:
            present = [row for row in matches if row.get(order_by) is not None]
            missing = [row for row in matches if row.get(order_by) is None]
            present.sort(key=lambda row: _sort_key(row[order_by]), reverse=descending)
            matches = present + missing

        if limit is not None:
            matches = matches[:limit]
        return deepcopy(matches)

    def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        self._table(table).append(stored)
        return deepcopy(stored)

    def update(self, table: str, values: Mapping[str, Any], *, eq: Mapping[str, Any]) -> int:
        """조건에 맞는 행을 수정하고 수정된 행 수를 반환"""
        updated = 0
        for row in self._table(table):
            if all(row.get(field) == value for field, value in eq.items()):
                row.update(values)
                updated += 1
        return updated

    def _table(self, table: str) -> List[Dict[str, Any]]:
        if table not in self._tables:
            raise StoreError(f"Unknown table: {table}")
        return self._tables[table]


def _sort_key(value: Any) -> tuple:
    # 같은 열에 datetime과 문자열이 섞여 있으면 타입별로 묶어서 비교
    return (isinstance(value, str), value)
