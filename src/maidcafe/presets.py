from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from maidcafe.models import (
    Achievement,
    Decoration,
    Equipment,
    EventEffect,
    Facility,
    Finance,
    GameEvent,
    GameState,
    MenuItem,
    Task,
    TaskCondition,
)


MAID_FIRST_NAMES = [
    "樱", "雪", "月", "花", "星", "铃", "美", "优", "爱", "心",
    "梦", "光", "风", "雨", "云", "琴", "诗", "画", "舞", "歌",
    "莉", "娜", "菲", "艾", "露", "蓝", "紫", "红", "白", "黑",
]
MAID_LAST_NAMES = ["野", "川", "山", "森", "原", "宫", "城", "桥", "井", "田", "木", "林", "海", "空"]

CUSTOMER_FIRST_NAMES = [
    "小明", "小红", "小华", "小丽", "小强", "小芳", "小军", "小燕",
    "阿杰", "阿美", "阿伟", "阿玲", "大卫", "玛丽", "约翰", "艾米",
    "太郎", "花子", "健一", "美咲", "翔太", "由美", "拓也", "真由",
]
CUSTOMER_LAST_NAMES = ["王", "李", "张", "刘", "陈", "杨", "黄", "赵", "周", "吴", "徐", "孙", "马", "朱", "胡", "郭"]

# (charm, skill, stamina, speed)
PERSONALITY_STAT_BONUSES: Dict[str, Tuple[int, int, int, int]] = {
    "cheerful": (10, 0, 5, 5),
    "cool": (5, 10, 5, 0),
    "shy": (0, 5, 10, 5),
    "energetic": (5, 5, 0, 10),
    "elegant": (15, 5, 0, 0),
    "gentle": (8, 5, 8, 4),
    "playful": (12, 3, 3, 7),
}


def default_menu_items() -> Dict[str, MenuItem]:
    items = [
        MenuItem(item_id="coffee", name="手冲咖啡", category="drinks", base_price=18.0, unlocked=True, popularity=60, prep_time=30),
        MenuItem(item_id="black_tea", name="红茶", category="drinks", base_price=15.0, unlocked=True, popularity=50, prep_time=20),
        MenuItem(item_id="omurice", name="爱心蛋包饭", category="main", base_price=38.0, unlocked=True, popularity=80, prep_time=90),
        MenuItem(item_id="parfait", name="草莓芭菲", category="desserts", base_price=28.0, unlocked=True, popularity=65, prep_time=45),
        MenuItem(item_id="latte_art", name="拉花拿铁", category="drinks", base_price=25.0, unlock_cost=150.0, popularity=70, prep_time=40),
        MenuItem(item_id="cheesecake", name="芝士蛋糕", category="desserts", base_price=26.0, unlock_cost=200.0, popularity=55, prep_time=30),
        MenuItem(item_id="curry_rice", name="咖喱饭", category="main", base_price=35.0, unlock_cost=250.0, popularity=60, prep_time=80),
        MenuItem(item_id="pancake", name="松饼塔", category="desserts", base_price=30.0, unlock_cost=300.0, popularity=58, prep_time=60),
        MenuItem(item_id="magic_soda", name="魔法汽水", category="special", base_price=32.0, unlock_cost=400.0, popularity=75, prep_time=25),
        MenuItem(item_id="photo_set", name="合影套餐", category="special", base_price=68.0, unlock_cost=800.0, popularity=85, prep_time=120),
        MenuItem(item_id="napolitan", name="拿坡里意面", category="main", base_price=42.0, unlock_cost=500.0, popularity=62, prep_time=90),
        MenuItem(item_id="sakura_mochi", name="樱饼", category="desserts", base_price=22.0, unlock_cost=300.0, popularity=70, prep_time=30, season="spring"),
        MenuItem(item_id="shaved_ice", name="刨冰", category="desserts", base_price=20.0, unlock_cost=300.0, popularity=72, prep_time=25, season="summer"),
        MenuItem(item_id="chestnut_cake", name="栗子蛋糕", category="desserts", base_price=30.0, unlock_cost=350.0, popularity=66, prep_time=40, season="autumn"),
        MenuItem(item_id="hot_cocoa", name="热可可", category="drinks", base_price=20.0, unlock_cost=300.0, popularity=68, prep_time=20, season="winter"),
    ]
    for it in items:
        it.current_price = it.base_price
    return {it.item_id: it for it in items}


# (id, name, bonus, cost)
_DECORATIONS = [
    ("flower-vase", "花瓶", 2, 100),
    ("wall-painting", "墙画", 3, 200),
    ("table-cloth", "桌布", 2, 150),
    ("curtains", "窗帘", 3, 250),
    ("chandelier", "吊灯", 5, 500),
    ("aquarium", "水族箱", 6, 800),
    ("piano", "钢琴", 8, 1200),
    ("bookshelf", "书架", 4, 400),
    ("fireplace", "壁炉", 7, 1000),
    ("fountain", "喷泉", 10, 2000),
    ("stage-lights", "舞台灯光", 8, 1500),
    ("vip-sofa", "VIP沙发", 6, 900),
    ("sakura-decor", "樱花装饰", 5, 600),
    ("summer-decor", "夏日装饰", 5, 600),
    ("autumn-decor", "秋叶装饰", 5, 600),
    ("christmas-tree", "圣诞树", 10, 1000),
]

# (id, name, upgrade_cost, max_level)
_EQUIPMENT = [
    ("coffee-machine", "咖啡机", 300, 5),
    ("oven", "烤箱", 350, 5),
    ("stove", "炉灶", 400, 5),
    ("refrigerator", "冰箱", 250, 5),
    ("dishwasher", "洗碗机", 200, 3),
    ("pos-system", "收银系统", 500, 3),
    ("air-conditioner", "空调", 600, 3),
    ("sound-system", "音响系统", 450, 3),
]


def default_decorations() -> Dict[str, Decoration]:
    return {
        did: Decoration(decoration_id=did, name=name, bonus=float(bonus), cost=float(cost))
        for did, name, bonus, cost in _DECORATIONS
    }


def default_equipment() -> Dict[str, Equipment]:
    return {
        eid: Equipment(equipment_id=eid, name=name, level=1, max_level=int(max_lv), upgrade_cost=float(cost))
        for eid, name, cost, max_lv in _EQUIPMENT
    }


# (id, name, description, condition, target, gold, reputation)
_DAILY_TASKS = [
    ("daily_serve_5", "今日招待", "服务 5 位顾客", "serve_customers", 5, 200, 1),
    ("daily_serve_10", "生意兴隆", "服务 10 位顾客", "serve_customers", 10, 400, 2),
    ("daily_gold_500", "营业额目标", "赚取 500 金币", "earn_gold", 500, 250, 1),
    ("daily_gold_1000", "日进斗金", "赚取 1000 金币", "earn_gold", 1000, 500, 2),
    ("daily_tips_100", "小费达人", "获得 100 金币小费", "earn_tips", 100, 150, 1),
    ("daily_satisfaction_80", "顾客至上", "服务满意度达到 80% 以上", "maintain_satisfaction", 80, 300, 2),
    ("daily_serve_vip", "VIP服务", "服务 2 位 VIP 顾客", "serve_vip", 2, 400, 3),
]

_GROWTH_TASKS = [
    ("growth_hire_3", "扩充团队", "累计雇佣 3 名女仆", "hire_maids", 3, 600, 2),
    ("growth_hire_5", "女仆军团", "累计雇佣 5 名女仆", "hire_maids", 5, 1200, 4),
    ("growth_unlock_5", "丰富菜单", "累计解锁 5 个菜单项", "unlock_menu_items", 5, 800, 3),
    ("growth_unlock_10", "菜单大师", "累计解锁 10 个菜单项", "unlock_menu_items", 10, 1500, 5),
    ("growth_upgrade_3", "升级店铺", "将咖啡厅升级到 3 级", "upgrade_cafe", 3, 1200, 4),
    ("growth_upgrade_5", "知名咖啡厅", "将咖啡厅升级到 5 级", "upgrade_cafe", 5, 2500, 6),
    ("growth_total_revenue_10000", "万元户", "累计收入达到 10000 金币", "total_revenue", 10000, 2000, 5),
    ("growth_total_customers_50", "人气咖啡厅", "累计服务 50 位顾客", "total_customers", 50, 1500, 4),
]


def _tasks_from_rows(rows: list, task_type: str) -> Dict[str, Task]:
    out: Dict[str, Task] = {}
    for tid, name, desc, cond, target, gold, rep in rows:
        out[tid] = Task(
            task_id=tid,
            name=name,
            description=desc,
            task_type=task_type,
            condition=TaskCondition(condition_type=cond, target=float(target)),
            reward_gold=float(gold),
            reward_reputation=float(rep),
        )
    return out


def daily_tasks() -> Dict[str, Task]:
    return _tasks_from_rows(_DAILY_TASKS, "daily")


def default_tasks() -> Dict[str, Task]:
    tasks = daily_tasks()
    tasks.update(_tasks_from_rows(_GROWTH_TASKS, "growth"))
    return tasks


# (id, name, description, stat key, target, gold)
_ACHIEVEMENTS = [
    ("first_customer", "开门红", "服务第一位顾客", "total_customers_served", 1, 50),
    ("serve_50", "熟客满座", "累计服务 50 位顾客", "total_customers_served", 50, 300),
    ("serve_200", "人气名店", "累计服务 200 位顾客", "total_customers_served", 200, 1000),
    ("revenue_5000", "小有积蓄", "累计收入 5000 金币", "total_revenue", 5000, 300),
    ("revenue_50000", "财源滚滚", "累计收入 50000 金币", "total_revenue", 50000, 2000),
    ("tips_500", "小费收藏家", "累计获得 500 金币小费", "total_tips_earned", 500, 200),
    ("perfect_10", "完美服务", "完成 10 次完美服务", "perfect_services_count", 10, 500),
    ("days_7", "一周年", "经营满 7 天", "total_days_played", 7, 300),
    ("days_30", "老字号", "经营满 30 天", "total_days_played", 30, 1500),
    ("hire_3", "小团队", "累计雇佣 3 名女仆", "maids_hired", 3, 200),
    ("streak_10", "连战连胜", "连续服务 10 位顾客无人离店", "customer_streak", 10, 400),
    ("cafe_level_5", "扩建达人", "咖啡厅达到 5 级", "cafe_level", 5, 1000),
    ("reputation_90", "远近闻名", "声望达到 90", "reputation", 90, 800),
]


def default_achievements() -> Dict[str, Achievement]:
    return {
        aid: Achievement(
            achievement_id=aid,
            name=name,
            description=desc,
            stat_key=key,
            target=float(target),
            reward_gold=float(gold),
        )
        for aid, name, desc, key, target, gold in _ACHIEVEMENTS
    }


_Effect = Tuple[str, float, bool]
_EventRow = Tuple[str, str, int, List[_Effect]]

POSITIVE_EVENTS: List[_EventRow] = [
    ("celebrity-visit", "名人来访", 360, [("reputation", 10, False), ("customers", 1.5, True)]),
    ("good-review", "好评如潮", 180, [("reputation", 5, False)]),
    ("lucky-day", "幸运日", 720, [("revenue", 1.3, True)]),
    ("media-coverage", "媒体报道", 480, [("customers", 2.0, True), ("reputation", 8, False)]),
    ("perfect-weather", "完美天气", 720, [("satisfaction", 1.2, True)]),
    ("food-blogger", "美食博主推荐", 420, [("customers", 1.4, True), ("reputation", 6, False)]),
    ("social-media-viral", "网红打卡", 540, [("customers", 1.8, True), ("reputation", 12, False)]),
    ("award-winning", "获奖认证", 720, [("reputation", 20, False), ("customers", 1.6, True)]),
    ("famous-chef-visit", "名厨来访", 480, [("reputation", 15, False), ("satisfaction", 1.2, True)]),
    ("pet-cafe-trend", "宠物咖啡热潮", 600, [("customers", 1.5, True), ("revenue", 1.25, True)]),
    ("local-hero", "本地英雄", 420, [("reputation", 12, False), ("customers", 1.4, True)]),
    ("business-partnership", "商业合作", 720, [("revenue", 1.35, True), ("reputation", 8, False)]),
    ("cooking-show", "料理秀", 360, [("customers", 1.6, True), ("satisfaction", 1.15, True)]),
    ("anniversary", "周年庆典", 480, [("customers", 2.0, True), ("revenue", 1.5, True)]),
    ("guerrilla-marketing", "创意营销", 540, [("customers", 1.7, True), ("reputation", 10, False)]),
]

NEGATIVE_EVENTS: List[_EventRow] = [
    ("equipment-breakdown", "设备故障", 360, [("satisfaction", 0.8, True)]),
    ("bad-weather", "恶劣天气", 480, [("customers", 0.5, True)]),
    ("health-inspection", "卫生检查", 240, [("satisfaction", 0.9, True), ("reputation", -3, False)]),
    ("supply-shortage", "原料短缺", 360, [("revenue", 0.85, True)]),
    ("bad-review", "差评", 180, [("reputation", -5, False)]),
    ("competitor-opening", "竞争对手开业", 540, [("customers", 0.7, True), ("revenue", 0.8, True)]),
    ("staff-absence", "员工请假", 420, [("satisfaction", 0.75, True), ("customers", 0.8, True)]),
    ("online-bullying", "网络暴力", 480, [("reputation", -15, False), ("customers", 0.7, True)]),
    ("food-poisoning", "食物中毒", 360, [("satisfaction", 0.6, True), ("reputation", -12, False)]),
    ("renovation-neighbor", "邻居装修", 420, [("customers", 0.75, True), ("satisfaction", 0.8, True)]),
    ("price-hike", "原料涨价", 600, [("revenue", 0.75, True)]),
    ("staff-steal", "员工偷窃", 240, [("reputation", -10, False), ("revenue", 0.7, True)]),
    ("fire-alarm", "火警误报", 180, [("customers", 0.65, True), ("satisfaction", 0.7, True)]),
    ("water-leak", "水管漏水", 300, [("revenue", 0.5, True), ("satisfaction", 0.8, True)]),
    ("complaint-letter", "投诉信", 180, [("reputation", -5, False), ("satisfaction", 0.9, True)]),
]

SEASONAL_EVENTS: Dict[str, List[_EventRow]] = {
    "spring": [
        ("cherry-blossom", "樱花季", 720, [("customers", 1.4, True), ("satisfaction", 1.1, True)]),
        ("valentines-day", "情人节", 720, [("customers", 1.6, True), ("revenue", 1.3, True)]),
        ("white-day", "白色情人节", 480, [("customers", 1.5, True), ("revenue", 1.25, True)]),
        ("flower-viewing", "赏樱活动", 540, [("customers", 1.4, True), ("revenue", 1.2, True)]),
        ("spring-rain", "春雨绵绵", 480, [("customers", 1.3, True), ("satisfaction", 1.1, True)]),
    ],
    "summer": [
        ("summer-festival", "夏日祭", 720, [("customers", 1.5, True), ("satisfaction", 1.15, True)]),
        ("heat-wave", "酷暑", 720, [("customers", 1.3, True)]),
        ("firework-display", "烟花大会", 480, [("customers", 1.7, True), ("revenue", 1.4, True)]),
        ("beach-season", "海滨度假", 540, [("customers", 1.5, True), ("reputation", 8, False)]),
        ("typhoon-warning", "台风警报", 360, [("customers", 0.6, True), ("satisfaction", 0.85, True)]),
    ],
    "autumn": [
        ("moon-festival", "中秋节", 720, [("customers", 1.4, True), ("revenue", 1.2, True)]),
        ("autumn-leaves", "红叶季", 720, [("satisfaction", 1.15, True)]),
        ("halloween", "万圣节", 480, [("customers", 1.5, True), ("revenue", 1.3, True)]),
        ("tsukimi", "赏月", 480, [("customers", 1.35, True), ("revenue", 1.25, True)]),
        ("typhoon-season", "台风季节", 420, [("customers", 0.7, True), ("revenue", 0.8, True)]),
    ],
    "winter": [
        ("christmas", "圣诞节", 720, [("customers", 1.8, True), ("revenue", 1.4, True), ("satisfaction", 1.2, True)]),
        ("new-year", "新年", 720, [("customers", 1.5, True), ("reputation", 5, False)]),
        ("snow-festival", "冰雪节", 540, [("customers", 1.3, True), ("satisfaction", 1.15, True)]),
        ("hot-pot-season", "火锅季节", 600, [("revenue", 1.35, True), ("satisfaction", 1.2, True)]),
        ("blizzard", "暴雪天气", 300, [("customers", 0.5, True), ("satisfaction", 0.9, True)]),
    ],
}

# Season -> (weather, weight)
WEATHER_WEIGHTS: Dict[str, List[Tuple[str, float]]] = {
    "spring": [("sunny", 5.0), ("cloudy", 3.0), ("rainy", 2.0)],
    "summer": [("sunny", 6.0), ("cloudy", 2.0), ("rainy", 2.0)],
    "autumn": [("sunny", 4.0), ("cloudy", 4.0), ("rainy", 2.0)],
    "winter": [("sunny", 3.0), ("cloudy", 3.0), ("rainy", 1.0), ("snowy", 3.0)],
}

# Multiplier on the customer arrival rate.
WEATHER_CUSTOMER_FACTOR: Dict[str, float] = {"sunny": 1.1, "cloudy": 1.0, "rainy": 0.85, "snowy": 0.8}


def build_event(row: _EventRow, event_type: str, started_at: int = 540) -> GameEvent:
    event_id, name, duration, effects = row
    return GameEvent(
        event_id=event_id,
        name=name,
        event_type=event_type,
        effects=[EventEffect(target=t, modifier=float(m), is_multiplier=bool(mul)) for t, m, mul in effects],
        duration=int(duration),
        started_at=int(started_at),
    )


def find_event(event_id: str, season: Optional[str] = None) -> Optional[GameEvent]:
    """Look up a catalog event by id (searching every season when none is given)."""

    for row in POSITIVE_EVENTS:
        if row[0] == event_id:
            return build_event(row, "positive")
    for row in NEGATIVE_EVENTS:
        if row[0] == event_id:
            return build_event(row, "negative")
    seasons = [season] if season else list(SEASONAL_EVENTS.keys())
    for s in seasons:
        for row in SEASONAL_EVENTS.get(s, []):
            if row[0] == event_id:
                return build_event(row, "seasonal")
    return None


def new_game_state(seed: int = 20260101) -> GameState:
    """Fresh day-1 state: empty staff, starter menu, level 1 cafe."""

    state = GameState()
    state.rng_seed = int(seed)
    state.rng_state = None
    state.finance = Finance(gold=1000.0)
    state.facility = Facility(
        cafe_level=1,
        max_seats=4,
        decorations=default_decorations(),
        equipment=default_equipment(),
        unlocked_areas=["main"],
    )
    state.menu_items = default_menu_items()
    state.tasks = default_tasks()
    state.achievements = default_achievements()
    return state
