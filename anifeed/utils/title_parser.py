"""
发布标题解析模块

从字幕组发布标题（Mikan RSS 标题、种子名）中提取集数、分辨率、字幕组、字幕类型和合集标记。
所有函数都是纯函数，不持有共享状态，可在多线程/多协程中并行调用。

规则表定义在 title_patterns.py，本模块只按优先级执行规则并组合结果。
"""

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

from . import title_patterns as P

logger = logging.getLogger(__name__)


# ============================================================================
# 数据结构
# ============================================================================

@dataclass
class ParsedTitle:
    """标题解析结果；is_collection 为 True 时 episode 一定为 None"""
    episode: Optional[int] = None
    episode_scope: Optional[str] = None
    resolution: Optional[str] = None
    subgroup: Optional[str] = None
    subtitle_type: Optional[str] = None
    is_collection: bool = False
    season: Optional[int] = None
    episode_range: Optional[Tuple[int, int]] = None

    @property
    def is_season_scoped(self) -> bool:
        return self.episode_scope == P.SCOPE_SEASON


class EpisodeToken(NamedTuple):
    episode: int
    scope: str
    rule: str
    season: Optional[int] = None


# ============================================================================
# 辅助函数
# ============================================================================

def chinese_numeral_to_int(text: str) -> Optional[int]:
    """将中文数字（十二、二十、一百零一）转换为整数，支持阿拉伯数字直通"""
    if not text:
        return None
    if text.isdigit():
        return int(text)

    total, current = 0, 0
    for ch in text:
        if ch in P.CHINESE_DIGIT_MAP:
            current = P.CHINESE_DIGIT_MAP[ch]
        elif ch in P.CHINESE_UNIT_MAP:
            total += (current or 1) * P.CHINESE_UNIT_MAP[ch]
            current = 0
        else:
            return None
    total += current
    return total or None


def _mask_technical_tokens(title: str) -> str:
    """屏蔽编码、分辨率、色深等技术标记，防止其中的数字被误认为集数"""
    masked = title
    for pattern in P.TECHNICAL_MASKS:
        masked = pattern.sub(' ', masked)
    return masked


def _is_incidental_number(value: int) -> bool:
    # 纯分辨率数值和年份
    return value in P.RESOLUTION_NUMBERS or 1900 <= value <= 2099


def _nearest(value: int, ladder) -> int:
    return min(ladder, key=lambda level: (abs(level - value), -level))


def _dimension_to_label(width: int, height: int) -> str:
    """将 WIDTHxHEIGHT 映射到最接近的命名分辨率，宽高各取一档后取较高者"""
    height_level = _nearest(height, P.RESOLUTION_LADDER)
    width_level = P.WIDTH_LADDER[_nearest(width, P.WIDTH_LADDER.keys())]
    return f"{max(height_level, width_level)}p"


# ============================================================================
# 提取器 1: 集数
# ============================================================================

def _episode_from_match(rule: P.EpisodeRule, match) -> Optional[EpisodeToken]:
    groups = match.groupdict()
    if groups.get('numeral'):
        episode = chinese_numeral_to_int(groups['numeral'])
    else:
        episode = int(groups['episode'])
    if episode is None:
        return None
    if rule.reject_incidental and _is_incidental_number(episode):
        return None
    season = int(groups['season']) if groups.get('season') else None
    return EpisodeToken(episode=episode, scope=rule.scope, rule=rule.name, season=season)


def extract_episode(title: str) -> Optional[EpisodeToken]:
    """
    按规则表优先级提取集数。

    同一优先级内取最靠左的候选；更具体的标记（SxxEyy、EP、第N话）总是压过
    标题里更早出现的普通数字。首部方括号视为字幕组位置，不参与方括号数字规则。
    """
    if not title:
        return None

    masked = _mask_technical_tokens(title)
    levels = sorted({rule.precedence for rule in P.EPISODE_RULES})

    for level in levels:
        candidates: List[Tuple[int, EpisodeToken]] = []
        for rule in P.EPISODE_RULES:
            if rule.precedence != level:
                continue
            for match in rule.pattern.finditer(masked):
                if rule.name == "bracket_number" and match.start() == 0:
                    continue
                token = _episode_from_match(rule, match)
                if token is not None:
                    candidates.append((match.start(), token))
        if candidates:
            candidates.sort(key=lambda c: c[0])
            return candidates[0][1]

    return None


# ============================================================================
# 提取器 2: 分辨率
# ============================================================================

def extract_resolution(title: str) -> Optional[str]:
    """提取所有分辨率标记，返回排名最高的一个（与出现顺序无关）"""
    if not title:
        return None

    found = set()
    if P.AI_4K_RE.search(title):
        found.add("AI4K")
    for m in P.UNIT_RESOLUTION_RE.finditer(title):
        found.add(f"{m.group(1)}p")
    if P.FOUR_K_RE.search(title):
        found.add("2160p")
    for m in P.DIMENSION_RE.finditer(title):
        found.add(_dimension_to_label(int(m.group('width')), int(m.group('height'))))

    if not found:
        return None
    return max(found, key=lambda label: P.RESOLUTION_RANK[label])


# ============================================================================
# 提取器 3: 字幕组
# ============================================================================

def extract_subgroup(title: str) -> Optional[str]:
    """取第一个半角/全角方括号的内容作为字幕组，括号前的前缀文字忽略，纯技术标记不算字幕组"""
    if not title:
        return None

    m = P.FIRST_BRACKET_RE.search(title)
    if not m:
        return None

    content = m.group('half') if m.group('half') is not None else m.group('full')
    content = P.SUBGROUP_DECORATION_RE.sub('', content).strip()
    if not content or P.NOT_SUBGROUP_RE.match(content):
        return None
    return content


# ============================================================================
# 提取器 4: 字幕类型
# ============================================================================

def _iter_segments(title: str) -> List[str]:
    segments = []
    for m in P.SEGMENT_RE.finditer(title):
        segments.append(next(g for g in m.groups() if g is not None))
    segments.append(title)
    return segments


def _compose_chinese_label(match) -> str:
    raw = match.group(0).strip()
    lang = match.group('lang') or ''
    delivery = match.groupdict().get('delivery')

    label = ''
    if lang:
        normalized = ''.join(P.LANG_CHAR_NORMALIZE.get(ch, ch) for ch in lang).replace('体', '')
        if not normalized or not set(normalized) <= set(P.LANG_ORDER):
            return raw
        key = ''.join(ch for ch in P.LANG_ORDER if ch in normalized)
        label = P.LANGUAGE_LABELS.get(key)
        if label is None:
            return raw

    return label + (P.DELIVERY_LABELS.get(delivery, '') if delivery else '')


def classify_subtitle(title: str) -> Optional[str]:
    """
    组合语言标记（简/繁/日/CHS/CHT）与交付方式（内嵌/内封/外挂）为规范字幕类型。

    优先扫描括号片段，最后回退到整个标题。没有样本证实的组合原样返回识别到的文字。
    """
    if not title:
        return None

    for segment in _iter_segments(title):
        m = P.CN_SUBTITLE_WITH_DELIVERY_RE.search(segment) or P.CN_SUBTITLE_LANG_RE.search(segment)
        if m:
            return _compose_chinese_label(m)

    tags = [m.group(1) for m in P.EN_SUBTITLE_TAG_RE.finditer(title)]
    if not tags:
        return None

    upper = {tag.upper() for tag in tags}
    if upper & P.SIMPLIFIED_TAGS and upper & P.TRADITIONAL_TAGS:
        return "简繁"
    return tags[0]


# ============================================================================
# 提取器 5: 合集
# ============================================================================

def _valid_range(start: int, end: int) -> bool:
    if start >= end:
        return False
    # 年份区间（2019-2020）不是集数范围
    if 1900 <= start <= 2099 and 1900 <= end <= 2099:
        return False
    return not (start in P.RESOLUTION_NUMBERS or end in P.RESOLUTION_NUMBERS)


def detect_collection(title: str) -> Tuple[bool, Optional[Tuple[int, int]]]:
    """
    判断是否为合集发布，返回 (是否合集, 集数范围)。

    "典藏版" 之类的版本修饰不影响判断，单集仍然是单集。
    """
    if not title:
        return False, None

    m = P.CJK_RANGE_RE.search(title)
    if m:
        return True, (int(m.group('start')), int(m.group('end')))

    if P.PART_BATCH_RE.search(title) and P.SEASON_DESIGNATOR_RE.search(title):
        return True, None

    masked = _mask_technical_tokens(title)
    for pattern in (P.EPISODE_RANGE_RE, P.NUMERIC_RANGE_RE):
        for m in pattern.finditer(masked):
            start, end = int(m.group('start')), int(m.group('end'))
            if _valid_range(start, end):
                return True, (start, end)

    if P.BATCH_KEYWORD_RE.search(title):
        return True, None

    return False, None


# ============================================================================
# 季度提示
# ============================================================================

def extract_season_number(text: Optional[str]) -> Optional[int]:
    """
    从季度名或标题中提取季度数字。

    支持: "Season 2", "S2", "2nd Season", "第二季", "第2期"
    """
    if not text or not text.strip():
        return None

    for pattern in P.SEASON_HINT_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        season = chinese_numeral_to_int(m.group(1))
        if season and season > 0:
            return season
    return None


# ============================================================================
# 核心函数: parse_title
# ============================================================================

def parse_title(title: Optional[str]) -> ParsedTitle:
    """
    解析一条发布标题，返回结构化结果。永不抛出异常，无法识别的字段为 None。
    """
    result = ParsedTitle()
    if not isinstance(title, str) or not title.strip():
        return result

    result.resolution = extract_resolution(title)
    result.subgroup = extract_subgroup(title)
    result.subtitle_type = classify_subtitle(title)

    token = extract_episode(title)
    result.season = token.season if token and token.season else extract_season_number(title)

    is_collection, episode_range = detect_collection(title)
    if is_collection:
        # 合集不提取集数，即使标题里同时出现了单集样式的数字
        result.is_collection = True
        result.episode_range = episode_range
    elif token is not None:
        result.episode = token.episode
        result.episode_scope = token.scope

    logger.debug(f"标题解析: '{title}' -> {result}")
    return result


def is_movie_by_title(title: Optional[str]) -> bool:
    """通过标题关键词判断是否为电影"""
    if not title:
        return False
    title_lower = title.lower()
    return any(kw in title_lower for kw in P.MOVIE_KEYWORDS)
