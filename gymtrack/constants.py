# gymtrack/constants.py

# Warm-up progressions keyed by number of warm-up sets.
# Each entry is an ordered list of (percentage of working weight, target reps), lightest first.
WARMUP_FORMULAS = {
    1: [(0.60, 5)],
    2: [(0.50, 5), (0.70, 3)],
    3: [(0.40, 5), (0.60, 3), (0.75, 2)],
    4: [(0.35, 6), (0.50, 5), (0.65, 3), (0.75, 2)],
    5: [(0.25, 8), (0.40, 6), (0.55, 4), (0.70, 2), (0.80, 1)],
}

DEFAULT_NUMBER_OF_WARMUPS = 3

# Never warm up above this fraction of the estimated 1RM
MAX_WARMUP_ONE_RM_FRACTION = 0.85

# Per-unit plate denominations (largest first), rounding increments and bar weights
UNIT_CONSTANTS = {
    'lbs': {
        'plates': (45.0, 35.0, 25.0, 10.0, 5.0, 2.5),
        'default_increment': 5.0,
        'fine_increment': 2.5,
        'standard_bar_weight': 45.0,  # Standard Olympic barbell
    },
    'kg': {
        'plates': (25.0, 20.0, 15.0, 10.0, 5.0, 2.5, 1.25),
        'default_increment': 2.5,
        'fine_increment': 1.25,
        'standard_bar_weight': 20.0,  # Standard Olympic barbell
    },
}

COMPOUND_LIFT_KEYWORDS = (
    "squat", "bench", "deadlift", "overhead press", "ohp",
    "military press", "front squat", "back squat",
    "incline bench", "decline bench", "sumo deadlift",
    "romanian deadlift", "rdl", "clean", "snatch",
    "clean and jerk", "push press", "thruster",
)

BODYWEIGHT_PHRASES = ("bodyweight", "body weight")

# Gym slang for loaded barbells, always in pounds (45 lb bar + 45 lb plates per side)
PLATE_SLANG_WEIGHTS = (
    (("two plate", "2 plate"), 225.0),
    (("three plate", "3 plate"), 315.0),
    (("one plate", "1 plate", "plate"), 135.0),
)

NUMBER_WORDS = {
    "zero": "0", "one": "1", "two": "2", "three": "3", "four": "4", "five": "5",
    "six": "6", "seven": "7", "eight": "8", "nine": "9", "ten": "10",
    "eleven": "11", "twelve": "12", "thirteen": "13", "fourteen": "14", "fifteen": "15",
    "sixteen": "16", "seventeen": "17", "eighteen": "18", "nineteen": "19", "twenty": "20",
    "twenty-one": "21", "twenty-two": "22", "twenty-three": "23", "twenty-four": "24", "twenty-five": "25",
    "thirty": "30", "forty": "40", "fifty": "50", "sixty": "60", "seventy": "70", "eighty": "80", "ninety": "90",
    "hundred": "100", "one hundred": "100", "two hundred": "200", "three hundred": "300",
}

# Heuristic bounds for unlabelled numbers in a spoken set
MIN_UNLABELLED_WEIGHT = 20  # exclusive
REPS_RANGE = (1, 50)  # inclusive
