"""
Lookup tables for the deterministic advice generator.

Every per-type table is keyed by the closed set of Bristol types 1-7 and is
checked for completeness when this module is imported, so a missing entry
fails at startup rather than producing a silent default at request time.
"""

from dataclasses import dataclass

from health_advisor.services.observation import BRISTOL_TYPES


@dataclass(frozen=True)
class AdviceTemplate:
    diet: tuple[str, ...]
    lifestyle: str
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class LifestylePlan:
    exercise_type: str
    exercise_duration: str
    exercise_frequency: str
    exercise_best_time: str
    toilet_timing: str
    toilet_position: str
    toilet_duration: str
    toilet_tips: str
    stress_techniques: tuple[str, ...]
    stress_daily_practice: str
    sleep_duration: str
    sleep_bedtime: str
    sleep_tips: str


ADVICE_TEMPLATES = {
    1: AdviceTemplate(
        diet=(
            "Increase dietary fiber (whole grains, vegetables)",
            "Drink 2000ml+ water daily",
            "Add probiotics",
        ),
        lifestyle="Walk 30 minutes daily, massage abdomen clockwise",
        warnings=("No bowel movement for 3+ days", "Severe abdominal pain"),
    ),
    2: AdviceTemplate(
        diet=(
            "Eat more high-fiber fruits and vegetables",
            "Add oatmeal to breakfast",
            "Have yogurt after meals",
        ),
        lifestyle="Regular exercise, establish toilet routine",
        warnings=("Persistent difficulty", "Blood in stool"),
    ),
    3: AdviceTemplate(
        diet=(
            "Moderately increase fruit intake",
            "Stay hydrated",
            "Add olive oil",
        ),
        lifestyle="Maintain exercise routine",
        warnings=("Monitor hydration",),
    ),
    4: AdviceTemplate(
        diet=("Maintain balanced diet", "Continue current habits"),
        lifestyle="Keep up good habits",
        warnings=(),
    ),
    5: AdviceTemplate(
        diet=(
            "Reduce fatty foods",
            "Avoid excessive fiber",
            "Check food hygiene",
        ),
        lifestyle="Regular schedule, manage stress",
        warnings=("Monitor if persistent",),
    ),
    6: AdviceTemplate(
        diet=(
            "Avoid dairy temporarily",
            "Bland diet",
            "Replenish electrolytes",
        ),
        lifestyle="Rest well, small frequent meals",
        warnings=("Dehydration signs", "Fever"),
    ),
    7: AdviceTemplate(
        diet=(
            "Immediate fluid and electrolyte replacement",
            "Fast temporarily",
            "BRAT diet",
        ),
        lifestyle="Seek medical evaluation immediately",
        warnings=("Severe dehydration", "Blood in stool", "High fever"),
    ),
}

HEALTH_LEVELS = {
    1: "warning",
    2: "attention",
    3: "good",
    4: "excellent",
    5: "good",
    6: "attention",
    7: "warning",
}

AVOID_FOODS = {
    1: ("Processed foods", "White bread", "Red meat"),
    2: ("High-fat foods", "Excessive dairy", "Refined starches"),
    3: ("Excessive coffee", "Alcohol"),
    4: (),
    5: ("Spicy foods", "Coffee"),
    6: ("Dairy products", "High-fiber foods", "Fried foods"),
    7: ("All solid foods (temporarily)", "Dairy", "Caffeine"),
}

MEAL_PLANS = {
    1: {
        "breakfast": "Oatmeal with berries + yogurt",
        "lunch": "Brown rice + plenty of vegetables + lean meat",
        "dinner": "Sweet potato + plenty of green vegetables",
        "snacks": "Apples, pears, dried figs",
    },
    2: {
        "breakfast": "Whole wheat toast + avocado + boiled egg",
        "lunch": "Buckwheat noodles + seaweed soup",
        "dinner": "Pumpkin soup + whole wheat bread",
        "snacks": "Yogurt, nuts",
    },
    3: {
        "breakfast": "Multigrain porridge + nuts",
        "lunch": "Whole grain rice + greens + fish",
        "dinner": "Vegetable soup + brown rice",
        "snacks": "Fruits, nuts",
    },
    4: {
        "breakfast": "Balanced breakfast",
        "lunch": "Balanced lunch",
        "dinner": "Balanced dinner",
        "snacks": "Moderate healthy snacks",
    },
    5: {
        "breakfast": "Plain porridge + steamed egg",
        "lunch": "Clear soup noodles + blanched vegetables",
        "dinner": "Congee + stir-fried vegetables",
        "snacks": "Crackers",
    },
    6: {
        "breakfast": "White toast + banana",
        "lunch": "White rice + steamed fish",
        "dinner": "Rice porridge + steamed egg",
        "snacks": "White toast",
    },
    7: {
        "breakfast": "Electrolyte drink + plain porridge (small amount)",
        "lunch": "Clear broth + white rice (small amount)",
        "dinner": "Avoid eating or small amount of clear soup",
        "snacks": "Avoid temporarily",
    },
}

WATER_INTAKE = {
    1: "2500-3000ml, sip throughout the day",
    2: "2000-2500ml, prefer warm water",
    3: "2000ml, normal intake",
    4: "1500-2000ml, maintain current intake",
    5: "2000ml, avoid ice water",
    6: "2500ml, include electrolytes",
    7: "3000ml+, with electrolyte drinks",
}

SUPPLEMENTS = {
    1: (
        {"name": "Probiotics", "dosage": "10 billion CFU", "timing": "After breakfast", "reason": "Improve gut flora"},
        {"name": "Magnesium", "dosage": "200mg", "timing": "Before bed", "reason": "Help bowel movement"},
    ),
    2: (
        {"name": "Probiotics", "dosage": "5 billion CFU", "timing": "After breakfast", "reason": "Balance gut"},
    ),
    3: (
        {"name": "Prebiotics", "dosage": "5g", "timing": "Before meals", "reason": "Promote beneficial bacteria"},
    ),
    4: (),
    5: (
        {"name": "Digestive enzymes", "dosage": "1 capsule", "timing": "Before meals", "reason": "Aid digestion"},
    ),
    6: (
        {"name": "Probiotics", "dosage": "20 billion CFU", "timing": "Empty stomach", "reason": "Restore gut balance"},
        {"name": "Electrolyte powder", "dosage": "1 packet", "timing": "As needed", "reason": "Replace lost electrolytes"},
    ),
    7: (
        {"name": "Oral rehydration solution", "dosage": "250ml", "timing": "Every 2 hours", "reason": "Prevent dehydration"},
    ),
}

IRON_AVOIDANCE_SUPPLEMENT = {
    "name": "Avoid iron supplements",
    "dosage": "None",
    "timing": "Until reviewed by a doctor",
    "reason": "Iron darkens stool and can mask or mimic signs of bleeding",
}

LIFESTYLE_PLANS = {
    1: LifestylePlan(
        exercise_type="Brisk walking, swimming, yoga (twisting poses)",
        exercise_duration="30 minutes",
        exercise_frequency="Daily",
        exercise_best_time="Morning or 1 hour after meals",
        toilet_timing="After waking or 30 minutes after meals",
        toilet_position="Elevate feet by 6 inches, lean forward slightly",
        toilet_duration="No more than 10 minutes",
        toilet_tips="Don't strain; exhale slowly and relax the abdomen",
        stress_techniques=("Deep belly breathing", "5-minute clockwise abdominal massage"),
        stress_daily_practice="10 minutes of relaxation before bed",
        sleep_duration="7-8 hours",
        sleep_bedtime="Before 11 PM",
        sleep_tips="A warm drink 1 hour before bed helps morning regularity",
    ),
    2: LifestylePlan(
        exercise_type="Jogging, cycling, core exercises",
        exercise_duration="30-40 minutes",
        exercise_frequency="5 times per week",
        exercise_best_time="Morning or 1 hour after meals",
        toilet_timing="Same time every morning after breakfast",
        toilet_position="Elevate feet by 6 inches",
        toilet_duration="No more than 10 minutes",
        toilet_tips="Respond to the urge promptly, never delay",
        stress_techniques=("Deep breathing exercises", "10-minute meditation"),
        stress_daily_practice="Daily relaxation practice",
        sleep_duration="7-8 hours",
        sleep_bedtime="Before 11 PM",
        sleep_tips="Keep a consistent wake time to anchor bowel rhythm",
    ),
    3: LifestylePlan(
        exercise_type="General aerobic exercise",
        exercise_duration="30 minutes",
        exercise_frequency="5 times per week",
        exercise_best_time="Morning or 1 hour after meals",
        toilet_timing="After waking or 30 minutes after meals",
        toilet_position="Elevate feet by 6 inches",
        toilet_duration="No more than 10 minutes",
        toilet_tips="Don't strain, stay relaxed",
        stress_techniques=("Deep breathing exercises", "10-minute meditation"),
        stress_daily_practice="Daily relaxation practice",
        sleep_duration="7-8 hours",
        sleep_bedtime="Before 11 PM",
        sleep_tips="Avoid screens before bed",
    ),
    4: LifestylePlan(
        exercise_type="Maintain current exercise",
        exercise_duration="30 minutes",
        exercise_frequency="5 times per week",
        exercise_best_time="Whenever fits your routine",
        toilet_timing="Keep your current natural rhythm",
        toilet_position="Elevate feet by 6 inches",
        toilet_duration="No more than 10 minutes",
        toilet_tips="Keep doing what works",
        stress_techniques=("Regular breaks during work", "Time outdoors"),
        stress_daily_practice="Keep up your current routine",
        sleep_duration="7-8 hours",
        sleep_bedtime="Before 11 PM",
        sleep_tips="Maintain a consistent sleep schedule",
    ),
    5: LifestylePlan(
        exercise_type="Light yoga, walking",
        exercise_duration="20-30 minutes",
        exercise_frequency="4-5 times per week",
        exercise_best_time="Not right after meals",
        toilet_timing="As needed, note frequency",
        toilet_position="Normal sitting position",
        toilet_duration="No more than 10 minutes",
        toilet_tips="Wash hands thoroughly and note any urgency",
        stress_techniques=("Box breathing (4-4-4-4)", "Progressive muscle relaxation"),
        stress_daily_practice="10 minutes of mindfulness after dinner",
        sleep_duration="7-8 hours",
        sleep_bedtime="Before 11 PM",
        sleep_tips="Avoid late heavy meals",
    ),
    6: LifestylePlan(
        exercise_type="Pause intense exercise, light stretching",
        exercise_duration="10-15 minutes",
        exercise_frequency="Daily as tolerated",
        exercise_best_time="When symptoms are calm",
        toilet_timing="As needed, track frequency",
        toilet_position="Normal sitting position",
        toilet_duration="Do not linger",
        toilet_tips="Use soft wipes and keep the area clean to avoid irritation",
        stress_techniques=("Slow diaphragmatic breathing", "Guided relaxation"),
        stress_daily_practice="Rest and reduce workload where possible",
        sleep_duration="8-9 hours",
        sleep_bedtime="Before 10:30 PM",
        sleep_tips="Keep water by the bed and rest as much as possible",
    ),
    7: LifestylePlan(
        exercise_type="Complete rest",
        exercise_duration="None until recovered",
        exercise_frequency="Resume gradually after symptoms resolve",
        exercise_best_time="Not applicable",
        toilet_timing="As needed, record every episode",
        toilet_position="Normal sitting position",
        toilet_duration="Do not linger",
        toilet_tips="Record frequency and look for blood or black stool",
        stress_techniques=("Slow breathing", "Rest in a calm environment"),
        stress_daily_practice="Prioritize rest and rehydration",
        sleep_duration="As much as needed",
        sleep_bedtime="Rest whenever possible",
        sleep_tips="Keep oral rehydration solution within reach overnight",
    ),
}

NEXT_CHECK = {
    1: "Tomorrow morning",
    2: "In 2 days",
    3: "In 3 days",
    4: "In 1 week",
    5: "In 3 days",
    6: "In 2 days",
    7: "Tomorrow morning",
}

EXPECTATIONS = {
    1: {
        "shortTerm": "Softer stool and easier passage within 3 days",
        "mediumTerm": "Stool approaching Type 3-4 within 1 week",
        "longTerm": "Regular, comfortable bowel habits within 1 month",
    },
    2: {
        "shortTerm": "Improved bowel frequency in 3 days",
        "mediumTerm": "Normal stool form in 1 week",
        "longTerm": "Regular bowel habits in 1 month",
    },
    3: {
        "shortTerm": "Less straining within 3 days",
        "mediumTerm": "Consistent Type 4 stool in 1 week",
        "longTerm": "Stable hydration habits in 1 month",
    },
    4: {
        "shortTerm": "Continued comfortable bowel movements",
        "mediumTerm": "Consistent ideal stool form over the week",
        "longTerm": "Lasting digestive health habits",
    },
    5: {
        "shortTerm": "Firmer stool within 3 days",
        "mediumTerm": "Stool returning to Type 4 in 1 week",
        "longTerm": "Stable digestion and fewer loose episodes in 1 month",
    },
    6: {
        "shortTerm": "Fewer loose episodes within 2-3 days",
        "mediumTerm": "Normal stool form in 1 week",
        "longTerm": "Restored gut balance in 1 month",
    },
    7: {
        "shortTerm": "Hydration stabilized within 24-48 hours",
        "mediumTerm": "Solid stool returning within 1 week after medical review",
        "longTerm": "Full recovery and identified cause in 1 month",
    },
}

MONITORING_POINTS = {
    1: ("Days between bowel movements", "Straining or pain", "Shape changes"),
    2: ("Bowel frequency", "Shape changes", "Color changes"),
    3: ("Hydration level", "Shape changes", "Frequency"),
    4: ("Color changes", "Shape changes", "Frequency"),
    5: ("Frequency", "Foods eaten before loose stool", "Shape changes"),
    6: ("Number of loose episodes per day", "Signs of dehydration", "Body temperature"),
    7: ("Fluid intake versus losses", "Signs of dehydration", "Blood in stool", "Body temperature"),
}

ADJUSTMENT_TRIGGERS = {
    1: ("No bowel movement for 3 days", "Severe abdominal pain or bloating"),
    2: ("No improvement for 3 days", "New symptoms appear"),
    3: ("Stool becomes harder", "New symptoms appear"),
    4: ("Stool type changes for more than 3 days", "New symptoms appear"),
    5: ("Loose stool persists beyond 1 week", "New symptoms appear"),
    6: ("More than 6 loose episodes per day", "Fever above 38.5°C"),
    7: ("Any sign of dehydration", "Symptoms last more than 24 hours", "Blood in stool"),
}

DEFAULT_TIPS = {
    1: (
        "Drink warm water with lemon first thing in the morning",
        "Take a 15-minute walk after meals to promote bowel movement",
        "Do 5-minute abdominal massage before bed",
    ),
    2: (
        "Establish fixed toilet times to build habits",
        "Add fermented foods like kimchi or miso",
        "Don't delay when you feel the urge",
    ),
    3: (
        "Drink a glass of water before meals",
        "Increase olive oil intake",
        "Maintain exercise routine",
    ),
    4: (
        "Continue your excellent habits",
        "Keep tracking for consistency",
        "Share your success with others",
    ),
    5: (
        "Pay attention to food storage and hygiene",
        "Reduce eating out frequency",
        "Chew food thoroughly",
    ),
    6: (
        "Follow BRAT diet temporarily",
        "Avoid caffeine and alcohol",
        "Eat small frequent meals",
    ),
    7: (
        "Seek medical evaluation immediately",
        "Document symptom changes",
        "Prepare medical history",
    ),
}

NATURAL_REMEDIES = {
    1: (
        {"name": "Flaxseed powder", "method": "Mix with warm water", "frequency": "Every morning", "benefit": "Natural laxative"},
        {"name": "Aloe vera juice", "method": "30ml before meals", "frequency": "Twice daily", "benefit": "Promotes bowel movement"},
    ),
    2: (
        {"name": "Prune juice", "method": "Drink 100ml before bed", "frequency": "Daily", "benefit": "Natural constipation relief"},
    ),
    3: (
        {"name": "Honey water", "method": "Warm water with honey", "frequency": "Morning on empty stomach", "benefit": "Moistens intestines"},
    ),
    4: (),
    5: (
        {"name": "Peppermint tea", "method": "Drink after meals", "frequency": "After each meal", "benefit": "Aids digestion"},
    ),
    6: (
        {"name": "Rice water", "method": "Sip frequently", "frequency": "Every 2 hours", "benefit": "Provides nutrients and stops diarrhea"},
    ),
    7: (
        {"name": "Oral rehydration salts", "method": "Follow package instructions", "frequency": "Continuous", "benefit": "Prevents dehydration"},
    ),
}

GINGER_TEA_REMEDY = {
    "name": "Ginger tea",
    "method": "Steep 3-4 slices of fresh ginger in hot water for 10 minutes",
    "frequency": "Once or twice daily",
    "benefit": "Calms the gut and slows rapid transit",
}

QUICK_TIPS = {
    1: "Immediately increase water and fiber intake, consider probiotics",
    2: "Eat more fruits and vegetables, increase exercise, establish regular toilet routine",
    3: "Moderately increase hydration, maintain exercise",
    4: "Excellent! Keep up your good habits",
    5: "Watch food hygiene, avoid greasy foods",
    6: "Replenish fluids and electrolytes, stick to bland diet temporarily",
    7: "Immediately rehydrate, seek medical attention if needed",
}

IMMEDIATE_ACTIONS = {
    1: "Drink 500ml warm water immediately, perform abdominal massage",
    2: "Increase vegetable intake today",
    3: "Hydrate now",
    4: "Maintain current routine",
    5: "Check food hygiene",
    6: "Replenish electrolytes, rest",
    7: "Seek medical help immediately",
}

# =============================================================================
# Prevention strategies (selected by constipation / loose / ideal branch)
# =============================================================================

CONSTIPATION_PREVENTION = (
    "Establish regular meal times",
    "Consume 25-30g dietary fiber daily",
    "Develop consistent toilet habits",
)
LOOSE_STOOL_PREVENTION = (
    "Practice food safety and hygiene",
    "Avoid overeating",
    "Manage stress levels",
)
GENERAL_PREVENTION = (
    "Maintain balanced diet",
    "Exercise regularly",
    "Get adequate sleep",
)

# =============================================================================
# Color-specific tables
# =============================================================================

COLOR_ADVICE = {
    "Red": (
        "Red coloration can indicate bleeding in the lower digestive tract; note any "
        "beets, tomatoes or red food coloring eaten in the last 48 hours and contact "
        "a doctor if it persists"
    ),
    "Black": (
        "Black, tarry stool can signal upper digestive bleeding; unless explained by "
        "bismuth medicines or black licorice, seek medical evaluation promptly"
    ),
    "Green": (
        "Green coloration often reflects rapid transit or many leafy greens; moderate "
        "green vegetable intake and check whether it resolves within 2-3 days"
    ),
    "Yellow": (
        "Yellow, greasy stool may point to fat malabsorption; reduce high-fat meals and "
        "watch for floating or unusually foul-smelling stool"
    ),
    "White": (
        "Pale or clay-colored stool can indicate reduced bile flow; avoid antacids "
        "containing aluminum hydroxide and consult a doctor"
    ),
}

GENERIC_COLOR_ADVICE = (
    "Monitor the {color} coloration over the next few days and note foods that may explain it"
)

COLOR_AVOID_FOODS = {
    "Red": ("Iron supplements (can mask or mimic signs of bleeding)",),
    "Black": (
        "Iron supplements (can mask or mimic signs of bleeding)",
        "Activated charcoal (darkens stool and hides bleeding)",
    ),
    "Green": ("Excess leafy greens until the color normalizes",),
}

VOLUME_ADVICE = {
    "small": (
        "Small stool volume: raise fiber gradually toward 25-30g per day and drink "
        "an extra 500ml of water"
    ),
    "large": (
        "Large stool volume: review portion sizes and watch for fatty or floating "
        "stool that may signal malabsorption"
    ),
}

# =============================================================================
# Personalized tip fragments. Each entry is (constipation-leaning, loose-leaning)
# =============================================================================

AGE_TIPS = {
    "under_30": (
        "Irregular schedules are common at your age; anchor one fixed mealtime a day to train a morning bowel rhythm",
        "Late nights and takeaway meals are common triggers at your age; keep to freshly cooked food for a few days",
    ),
    "30_to_50": (
        "Work stress slows digestion; block 10 unhurried minutes after breakfast for the bathroom",
        "Stress and skipped meals can loosen stool; eat at regular times even on busy workdays",
    ),
    "50_plus": (
        "Gut motility slows with age; review any medications that may constipate with your doctor",
        "Dehydration sets in faster after 50; sip fluids steadily and review medications that loosen stool",
    ),
}

DIET_TIPS = {
    "vegetarian": (
        "Your vegetarian diet is fiber-rich; pair it with at least 2 liters of water so the fiber can work",
        "Legumes can be hard to digest while stool is loose; switch to well-cooked lentils and tofu for now",
    ),
    "vegan": (
        "Add ground flaxseed or chia to plant meals and make sure fluids keep pace with fiber",
        "Temporarily reduce raw vegetables and beans; favor rice, bananas and cooked carrots",
    ),
    "keto": (
        "Low-carb diets often lack fiber; add low-carb vegetables, chia seeds and psyllium husk",
        "High-fat keto meals can loosen stool; reduce added oils and MCT products for a few days",
    ),
    "regular": (
        "Swap one refined grain per day for a whole-grain version",
        "Cut back on greasy and spicy dishes until stool firms up",
    ),
    "other": (
        "Whatever your diet, aim for 25-30g of fiber daily from foods you tolerate",
        "Whatever your diet, favor simple, well-cooked meals until stool firms up",
    ),
}

EXERCISE_TIPS = {
    "sedentary": (
        "Start with a 10-minute walk after each meal; movement stimulates the bowel",
        "Gentle walks are enough for now; avoid starting intense exercise until digestion settles",
    ),
    "light": (
        "Extend your walks to 30 minutes and add a few yoga twists",
        "Keep activity light and rehydrate after every session",
    ),
    "moderate": (
        "Your activity level helps motility; add core work such as planks twice a week",
        "Lower intensity for a few days and drink an electrolyte drink after workouts",
    ),
    "active": (
        "Heavy training can dehydrate you; replace sweat losses to keep stool soft",
        "Intense training can worsen loose stool; scale back and replace electrolytes",
    ),
}


def _require_all_types(name: str, table: dict) -> None:
    missing = set(BRISTOL_TYPES) - set(table)
    if missing:
        raise RuntimeError(f"{name} missing Bristol types: {sorted(missing)}")


for _name, _table in (
    ("ADVICE_TEMPLATES", ADVICE_TEMPLATES),
    ("HEALTH_LEVELS", HEALTH_LEVELS),
    ("AVOID_FOODS", AVOID_FOODS),
    ("MEAL_PLANS", MEAL_PLANS),
    ("WATER_INTAKE", WATER_INTAKE),
    ("SUPPLEMENTS", SUPPLEMENTS),
    ("LIFESTYLE_PLANS", LIFESTYLE_PLANS),
    ("NEXT_CHECK", NEXT_CHECK),
    ("EXPECTATIONS", EXPECTATIONS),
    ("MONITORING_POINTS", MONITORING_POINTS),
    ("ADJUSTMENT_TRIGGERS", ADJUSTMENT_TRIGGERS),
    ("DEFAULT_TIPS", DEFAULT_TIPS),
    ("NATURAL_REMEDIES", NATURAL_REMEDIES),
    ("QUICK_TIPS", QUICK_TIPS),
    ("IMMEDIATE_ACTIONS", IMMEDIATE_ACTIONS),
):
    _require_all_types(_name, _table)
