"""Built-in challenge phrases, used when config/defaults.yaml provides none."""

MOTIVATIONAL_PHRASES = (
    "I am unstoppable",
    "I am capable of achieving anything",
    "I am focused and determined",
    "I am ready to conquer today",
    "I am strong and resilient",
    "I am in control of my destiny",
    "I am worthy of success",
    "I am grateful for this new day",
    "I am energized and motivated",
    "I am confident in my abilities",
    "I am committed to my goals",
    "I am making progress every day",
    "I am choosing positivity today",
    "I am powerful beyond measure",
    "I am creating my own opportunities",
    "I am disciplined and focused",
    "I am rising above challenges",
    "I am becoming my best self",
    "I am taking charge of my life",
    "I am worthy of greatness",
    "I am embracing this moment",
    "I am building my future now",
    "I am stronger than my excuses",
    "I am committed to excellence",
    "I am ready to make it happen",
)
