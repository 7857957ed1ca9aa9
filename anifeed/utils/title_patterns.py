"""
发布标题识别规则表

所有正则按 "规则 → 字段 → 优先级" 组织成有序表，title_parser 只负责按顺序执行。
新增/调整规则时只需修改本文件，排除项（编码、分辨率）单独成表，便于逐条审计和测试。
"""

import re
from typing import Dict, List, NamedTuple, Pattern, Tuple


# ============================================================================
# 常量: 数字映射
# ============================================================================

CHINESE_DIGIT_MAP = {
    '零': 0, '〇': 0, '一': 1, '二': 2, '两': 2, '三': 3, '四': 4, '五': 5,
    '六': 6, '七': 7, '八': 8, '九': 9,
    '壹': 1, '贰': 2, '叁': 3, '肆': 4, '伍': 5, '陆': 6, '柒': 7, '捌': 8, '玖': 9,
}

CHINESE_UNIT_MAP = {'十': 10, '拾': 10, '百': 100, '佰': 100}

CHINESE_NUM_CHARS = '零〇一二两三四五六七八九十百壹贰叁肆伍陆柒捌玖拾佰'


# ============================================================================
# 排除项: 在匹配集数前先屏蔽的技术标记
# ============================================================================

# 顺序有意义：先屏蔽长模式（尺寸、编码），再屏蔽单位数字
TECHNICAL_MASKS: List[Pattern] = [
    # 尺寸标记 1920x1080 / 1920*1080 / 1920×1080
    re.compile(r'\d{3,4}\s*[x×*＊]\s*\d{3,4}', re.IGNORECASE),
    # 视频编码，包含 x.264 这种点分写法
    re.compile(r'(?<![a-zA-Z0-9])[xXhH]\.?26[45](?![0-9])'),
    # 分辨率单位、4K/8K
    re.compile(r'(?<![a-zA-Z0-9])(?:AI)?\d{3,4}[pPiI](?![a-zA-Z0-9])'),
    re.compile(r'(?<![a-zA-Z0-9])(?:AI)?[248][kK](?![a-zA-Z0-9])'),
    # 色深、帧率、声道
    re.compile(r'(?<![a-zA-Z0-9])(?:Ma|Hi)?10[- ]?bits?(?![a-zA-Z0-9])', re.IGNORECASE),
    re.compile(r'(?<![a-zA-Z0-9])8[- ]?bits?(?![a-zA-Z0-9])', re.IGNORECASE),
    re.compile(r'(?<![a-zA-Z0-9])\d{2,3}fps(?![a-zA-Z0-9])', re.IGNORECASE),
    # 声道必须带编码前缀或 ch 后缀，裸的 13.5 是总集篇序号而不是声道
    re.compile(
        r'(?:(?:AAC|FLAC|DDP?|AC3|TrueHD|DTS)\s?[0-9]\.[0-9](?:ch)?|(?<![0-9.])[0-9]\.[0-9]ch)(?![0-9])',
        re.IGNORECASE,
    ),
    # 哈希、CRC
    re.compile(r'\[[A-Fa-f0-9]{8}\]'),
]

# 纯分辨率数值，永远不能当作集数
RESOLUTION_NUMBERS = {480, 720, 1080, 2160}


# ============================================================================
# 集数规则表
# ============================================================================

SCOPE_SEASON = "season"
SCOPE_ABSOLUTE = "absolute"


class EpisodeRule(NamedTuple):
    """一条集数识别规则：按 precedence 升序尝试，先命中者生效"""
    name: str
    pattern: Pattern
    scope: str
    precedence: int
    # 是否对候选值应用 "纯分辨率/年份" 排除
    reject_incidental: bool = False


_VERSION = r'(?:[vV]\d{1,2})?'
_END = r'(?:\s*(?:END|Fin|完))?'
# 13.5 这类小数序号不是单集
_NOT_DECIMAL = r'(?!\.\d)'

EPISODE_RULES: List[EpisodeRule] = [
    EpisodeRule(
        "season_episode",
        re.compile(
            r'(?<![a-zA-Z0-9])S(?P<season>\d{1,2})[\s._-]?EP?(?P<episode>\d{1,4})' + _NOT_DECIMAL + _VERSION + r'(?![0-9])',
            re.IGNORECASE,
        ),
        SCOPE_SEASON, 1,
    ),
    EpisodeRule(
        "ep_marker",
        re.compile(
            r'(?<![a-zA-Z0-9])(?:EP?|Episode)[\s._]?(?P<episode>\d{1,4})' + _NOT_DECIMAL + _VERSION + r'(?![0-9a-zA-Z])',
            re.IGNORECASE,
        ),
        SCOPE_ABSOLUTE, 2,
    ),
    EpisodeRule(
        "cjk_ordinal",
        re.compile(r'第\s*(?P<episode>\d{1,4})\s*[话話集回]'),
        SCOPE_ABSOLUTE, 3,
    ),
    EpisodeRule(
        "cjk_ordinal_numeral",
        re.compile(r'第\s*(?P<numeral>[' + CHINESE_NUM_CHARS + r']{1,5})\s*[话話集回]'),
        SCOPE_ABSOLUTE, 3,
    ),
    EpisodeRule(
        "dash_number",
        re.compile(
            r'(?:^|\s)[-–—]\s*(?P<episode>\d{1,4})' + _NOT_DECIMAL + _VERSION + _END + r'(?=$|[\s\[\]【】(（._])'
        ),
        SCOPE_ABSOLUTE, 4, True,
    ),
    EpisodeRule(
        "bracket_number",
        re.compile(r'[\[【](?P<episode>\d{1,4})' + _NOT_DECIMAL + _VERSION + _END + r'[\]】]'),
        SCOPE_ABSOLUTE, 4, True,
    ),
]


# ============================================================================
# 合集规则
# ============================================================================

# 中文集数范围：第841-847话
CJK_RANGE_RE = re.compile(
    r'第\s*(?P<start>\d{1,4})\s*[-~～至]\s*(?P<end>\d{1,4})\s*[话話集回]'
)

# 标记集数范围：S01E01-E12 / S01E01-12 / EP01-EP12 / E01~E12
# 带空格的分隔符右侧必须再出现 E/EP，避免 "EP05 - 2024" 被误判
EPISODE_RANGE_RE = re.compile(
    r'(?<![a-zA-Z0-9])(?:S\d{1,2}[\s._-]?)?EP?(?P<start>\d{1,4})'
    r'(?:\s*[-~～]\s*(?:S\d{1,2}[\s._-]?)?EP?|-|\s*[~～]\s*)'
    r'(?P<end>\d{1,4})(?![0-9])',
    re.IGNORECASE,
)

# 数字范围：01-12 / [01~12]；带空格的 " - " 是集数分隔符，不算范围
NUMERIC_RANGE_RE = re.compile(
    r'(?<![a-zA-Z0-9.])(?P<start>\d{1,4})(?:-|\s*[~～]\s*)(?P<end>\d{1,4})(?![a-zA-Z0-9.])'
)

# Part 1+2 分段合集标记，需要同时出现季度标记
PART_BATCH_RE = re.compile(r'(?<![a-zA-Z])Part\s*\d+\s*\+\s*\d+', re.IGNORECASE)

SEASON_DESIGNATOR_RE = re.compile(
    r'(?<![a-zA-Z0-9])S\d{1,2}(?![0-9])'
    r'|Season\s*\d+'
    r'|\d{1,2}(?:st|nd|rd|th)\s*Season'
    r'|第\s*[0-9' + CHINESE_NUM_CHARS + r']+\s*[季期]',
    re.IGNORECASE,
)

BATCH_KEYWORD_RE = re.compile(r'合集|全集|(?<![a-zA-Z])Batch(?![a-zA-Z])', re.IGNORECASE)


# ============================================================================
# 季度提示
# ============================================================================

SEASON_HINT_PATTERNS: List[Pattern] = [
    re.compile(r'Season\s*(\d{1,2})', re.IGNORECASE),
    re.compile(r'(?<![a-zA-Z0-9])S\s*0?(\d{1,2})(?![0-9a-zA-Z])', re.IGNORECASE),
    re.compile(r'(\d{1,2})(?:st|nd|rd|th)\s*Season', re.IGNORECASE),
    re.compile(r'第\s*([0-9' + CHINESE_NUM_CHARS + r']+)\s*[季期]'),
]


# ============================================================================
# 分辨率
# ============================================================================

# 名称 → 排名，AI4K 与 2160p 同级，同级时优先 AI4K
RESOLUTION_RANK: Dict[str, Tuple[int, int]] = {
    "480p": (480, 0),
    "720p": (720, 0),
    "1080p": (1080, 0),
    "2160p": (2160, 0),
    "AI4K": (2160, 1),
}

RESOLUTION_LADDER = (480, 720, 1080, 2160)

# 宽度 → 对应的高度档位，用于 1920x800 这类裁切尺寸
WIDTH_LADDER = {854: 480, 1280: 720, 1920: 1080, 3840: 2160}

AI_4K_RE = re.compile(r'(?<![a-zA-Z0-9])AI[\s_-]?(?:2160[pP]|4[kK])(?![a-zA-Z0-9])')

UNIT_RESOLUTION_RE = re.compile(r'(?<![a-zA-Z0-9])(480|720|1080|2160)[pP](?![a-zA-Z0-9])')

FOUR_K_RE = re.compile(r'(?<![a-zA-Z0-9])4[kK](?![a-zA-Z0-9])')

# 尺寸标记：'x' 两侧不允许空格，避免与 "1080 x264" 混淆；'*' 和全角 '×' 允许空格
DIMENSION_RE = re.compile(
    r'(?<![0-9])(?P<width>\d{3,4})(?:[xX]|\s*[×*＊]\s*)(?P<height>\d{3,4})(?![0-9])'
)


# ============================================================================
# 字幕组
# ============================================================================

FIRST_BRACKET_RE = re.compile(r'\[(?P<half>[^\[\]]*)\]|【(?P<full>[^【】]*)】')

SUBGROUP_DECORATION_RE = re.compile(r'[★☆■□◆◇●○•]')

NOT_SUBGROUP_RE = re.compile(
    r'^(?:\d+'
    r'|\d{3,4}[pPiI]'
    r'|[xXhH]\.?26[45]|HEVC|AVC|AV1'
    r'|MP4|MKV'
    r'|CHS|CHT|GB|BIG5'
    r'|4K)$',
    re.IGNORECASE,
)


# ============================================================================
# 字幕类型
# ============================================================================

SEGMENT_RE = re.compile(r'\[([^\[\]]*)\]|【([^【】]*)】|\(([^()]*)\)|（([^（）]*)）')

# 中文语言 + 交付方式：简日内封 / 繁体内嵌 / 内嵌
CN_SUBTITLE_WITH_DELIVERY_RE = re.compile(
    r'(?P<lang>[简繁日簡][简繁日簡体體中文]{0,5})?\s*(?P<delivery>内嵌|內嵌|内封|內封|外挂|外掛)'
)

# 仅有语言组合，不带交付方式；单字 "简"/"繁" 不单独识别，避免误伤正文
CN_SUBTITLE_LANG_RE = re.compile(
    r'(?P<lang>简繁日|简日繁|繁简日|简繁|繁简|简日|繁日|简体|繁体|簡體|繁體|簡繁|简中|繁中)'
)

# "1.4 GB" 中的 GB 是文件大小单位，数字加空格之后的标记不识别
EN_SUBTITLE_TAG_RE = re.compile(
    r'(?<![a-zA-Z0-9.])(?<![0-9]\s)(CHS|CHT|GB|BIG5|JPSC|JPTC)(?![a-zA-Z])',
    re.IGNORECASE,
)

# 语言字符规范化
LANG_CHAR_NORMALIZE = {'簡': '简', '體': '体'}

LANG_ORDER = '简繁日'

# 已有样本证实的语言组合标签；其余组合原样返回
LANGUAGE_LABELS = {
    '简': '简体',
    '繁': '繁体',
    '简繁': '简繁',
    '简日': '简日',
    '繁日': '繁日',
    '简繁日': '简繁日',
}

DELIVERY_LABELS = {
    '内嵌': '内嵌', '內嵌': '内嵌',
    '内封': '内封', '內封': '内封',
    '外挂': '外挂', '外掛': '外挂',
}

SIMPLIFIED_TAGS = {'CHS', 'GB'}
TRADITIONAL_TAGS = {'CHT', 'BIG5'}


# ============================================================================
# 电影判断
# ============================================================================

MOVIE_KEYWORDS = ["剧场版", "劇場版", "movie", "映画"]

# Bangumi subject.platform 中表示电影的取值，比较时忽略大小写
MOVIE_PLATFORMS = {"剧场版", "劇場版", "movie", "电影"}
