DIFFICULTIES = ["Beginner", "Medium", "Hard", "Expert/Advanced"]

REST_NAME = "Rest"

# focus area -> difficulty -> [{"name", "video_path"}]
DEFAULT_CATALOG = {
    "Chest": {
        "Beginner": [],
        "Medium": [{"name": "Push-Ups", "video_path": "/resources/pushupsAngle2.mp4"}],
        "Hard": [],
        "Expert/Advanced": [
            {"name": "One-Legged Skier Push-Ups", "video_path": "/resources/onelegskierpushups.mp4"},
        ],
    },
    "Legs": {
        "Beginner": [
            {"name": "Squats", "video_path": "/resources/squats.mp4"},
            {"name": "3-Way Lunges", "video_path": "/resources/3wayLungesAngle2.mp4"},
        ],
        "Medium": [
            {"name": "Alternating Split Squats", "video_path": "/resources/splitSquats.mp4"},
            {"name": "Frog Hops", "video_path": "/resources/frogHops.mp4"},
            {"name": "Squat Jumps", "video_path": "/resources/squatJumps.mp4"},
        ],
        "Hard": [
            {"name": "180° Squat Jumps", "video_path": "/resources/180JumpSquats.mp4"},
            {"name": "Ninja Tuck Jumps", "video_path": "/resources/ninjaTuckJumps.mp4"},
            {"name": "Prisoner Squat Jumps", "video_path": "/resources/prisonerSquatJumps.mp4"},
            {"name": "3-Point Alternating Hops", "video_path": "/resources/3pointAltHops.mp4"},
        ],
        "Expert/Advanced": [
            {"name": "Prisoner Ninja Tuck Jumps", "video_path": "/resources/prisonerNinjaTuckJumps.mp4"},
            {"name": "Triple Skyfalls", "video_path": "/resources/3xskyfalls.mp4"},
        ],
    },
    "Legs, No Cardio": {
        "Beginner": [
            {"name": "Reverse Lunge to High Knee", "video_path": "/resources/reverseLungeHighKneeAngle2.mp4"},
        ],
    },
    "Shoulders": {
        "Beginner": [],
        "Medium": [{"name": "Pike Push-Ups", "video_path": "/resources/pikePushups.mp4"}],
        "Hard": [{"name": "Kneeling Spider-Man Push-Ups", "video_path": "/resources/kneelingSpidermanPushups.mp4"}],
        "Expert/Advanced": [{"name": "Spider-Man Push-Ups", "video_path": "/resources/spidermanPushups.mp4"}],
    },
    "Triceps": {
        "Beginner": [{"name": "Bench Dips", "video_path": "/resources/benchDipsAngle1.mp4"}],
    },
    "Glutes": {
        "Beginner": [
            {"name": "Bridges", "video_path": "/resources/bridgesAngle2.mp4"},
            {"name": "Hip Bucks", "video_path": "/resources/hipBucks.mp4"},
        ],
        "Medium": [{"name": "Single Leg Hip Bucks", "video_path": "/resources/singleLegHipBucks.mp4"}],
    },
    "Core": {
        "Beginner": [
            {"name": "Bear Taps", "video_path": "/resources/bearTapsAngle2.mp4"},
            {"name": "Walking Marches", "video_path": "/resources/walkingMarches.mp4"},
        ],
        "Medium": [
            {"name": "Jackknives - Level 1", "video_path": "/resources/jackknivesLevel1.mp4"},
            {"name": "Russian V-Twists", "video_path": "/resources/russianVTwistsAngle1.mp4"},
            {"name": "Spider-Man Lunges", "video_path": "/resources/spidermanLungesAngle2.mp4"},
        ],
        "Hard": [
            {"name": "Bicycle Crunches", "video_path": "/resources/bicycleCrunchesAngle2.mp4"},
            {"name": "Jackknives - Level 2", "video_path": "/resources/jackknivesLevel2.mp4"},
            {"name": "Mountain Climbers", "video_path": "/resources/mountainClimbers.mp4"},
            {"name": "Plank Elbow to Knee Taps", "video_path": "/resources/plankElbowToKneeTaps.mp4"},
            {"name": "Side Kickthroughs", "video_path": "/resources/sideKickthroughs.mp4"},
        ],
        "Expert/Advanced": [
            {"name": "Twisting Piston Push-Ups", "video_path": "/resources/twistingPistonPushUps.mp4"},
        ],
    },
    "Core, No Cardio": {
        "Beginner": [
            {"name": "Ab-Roller", "video_path": "/resources/abRollerAngle1.mp4"},
            {"name": "Bird Dogs", "video_path": "/resources/birdDogs.mp4"},
            {"name": "Good Mornings", "video_path": "/resources/goodMorningsAngle2.mp4"},
            {"name": "Swipers", "video_path": "/resources/swipersAngle2.mp4"},
        ],
        "Medium": [
            {"name": "Plank Elbow Ups", "video_path": "/resources/plankElbowUps.mp4"},
            {"name": "Shoulder Taps", "video_path": "/resources/shoulderTapsAngle1.mp4"},
        ],
    },
    "Cardio": {
        "Beginner": [
            {"name": "Jump/Air Rope", "video_path": "/resources/jumprope.mp4"},
            {"name": "Shadow Boxing", "video_path": "/resources/shadowboxing.mp4"},
            {"name": "Toe Taps", "video_path": "/resources/toeTaps.mp4"},
        ],
        "Medium": [
            {"name": "High Knees", "video_path": "/resources/highknees.mp4"},
            {"name": "Jumping Jacks", "video_path": "/resources/jumpingjacks.mp4"},
            {"name": "Skier Hops", "video_path": "/resources/skierhops.mp4"},
        ],
    },
}

DEFAULT_SETTINGS = {
    "video_mode": "Stream",
    "did_prompt_for_video_mode": False,
    "stream_on_cache_miss": True,
    "enable_sound": True,
    "enable_haptics": True,
    "focus_areas": ["Legs", "Core", "Cardio"],
    "difficulty": "Expert/Advanced",
    "total_minutes": 10,
    "exercise_duration": 20,
    "rest_duration": 10,
    "rest_every": 1,
}
