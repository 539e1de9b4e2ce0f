# -*- coding: utf-8 -*-
"""
干支纪年与节气近似表

按年份打印干支纪年、十二个月的干支纪月，以及按日序近似得到的二十四节气起始日期。

用法:
    python almanac.py [year | start-end | y1,y2,...]
"""
from __future__ import annotations

import sys
from datetime import datetime
from typing import List

from core.ganzhi import SOLAR_TERMS, month_label, solar_term_start, year_label
from core.jiazi import resolve_body_for_cycle_name


def parse_year_arguments(arg: str) -> List[int]:
    """解析年份参数，支持单年、范围以及逗号分隔列表。"""

    years: List[int] = []
    parts = [p.strip() for p in arg.split(',') if p.strip()]
    if not parts:
        raise ValueError("年份参数为空")

    for part in parts:
        if '-' in part:
            start_str, end_str = part.split('-', 1)
            start = int(start_str)
            end = int(end_str)
            if end < start:
                raise ValueError(f"范围 {part} 结束年份早于开始年份")
            years.extend(range(start, end + 1))
        else:
            years.append(int(part))

    # 去重同时保持输入顺序
    seen = set()
    ordered_years: List[int] = []
    for year in years:
        if year < 1:
            raise ValueError(f"年份必须为公元后年份: {year}")
        if year not in seen:
            ordered_years.append(year)
            seen.add(year)

    return ordered_years


def format_year(year: int) -> str:
    label = year_label(year)
    body = resolve_body_for_cycle_name(label.name)
    lines = [f"{year} 年  {label.name}年  （对应天体：{body.display_name}）"]
    lines.append("-" * 64)
    months = "  ".join(f"{m:>2}月 {month_label(year, m).name}" for m in range(1, 13))
    lines.append(months)
    lines.append("")
    for term in SOLAR_TERMS:
        start = solar_term_start(year, term.index)
        lines.append(f"{term.name:<4} {term.code:<4} {start.isoformat()}")
    return "\n".join(lines)


def main(argv: List[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args:
        try:
            years = parse_year_arguments(args[0])
        except ValueError as exc:
            print(f"年份参数无效: {exc}")
            return 1
    else:
        years = [datetime.now().year]

    for idx, year in enumerate(years):
        if idx:
            print("\n" + "=" * 72 + "\n")
        print(format_year(year))
    return 0


if __name__ == "__main__":
    sys.exit(main())
