# Header names exactly as the signup form and the progress export produce them.

TEAM_EMAIL_HEADER = "Confirm your email address linked to your Skills Boost Profile"

MAIN_EMAIL_HEADER = "User Email"
MAIN_NAME_HEADER = "User Name"
MAIN_BADGES_HEADER = "# of Skill Badges Completed"
MAIN_ARCADE_HEADER = "# of Arcade Games Completed"
MAIN_PROFILE_HEADER = "Google Cloud Skills Boost Profile URL"

MAIN_REQUIRED_HEADERS = [
    MAIN_EMAIL_HEADER,
    MAIN_NAME_HEADER,
    MAIN_BADGES_HEADER,
    MAIN_ARCADE_HEADER,
    MAIN_PROFILE_HEADER,
]

# Export column labels, in export order
EXPORT_RANK_HEADER = "CalculatedRank"
EXPORT_TEAM_HEADER = "TeamName"
EXPORT_PROGRESS_HEADER = "Progress"
EXPORT_TOTAL_HEADER = "Total Completions"

EXPORT_HEADERS = [
    EXPORT_RANK_HEADER,
    MAIN_NAME_HEADER,
    MAIN_EMAIL_HEADER,
    EXPORT_TEAM_HEADER,
    EXPORT_PROGRESS_HEADER,
    MAIN_BADGES_HEADER,
    MAIN_ARCADE_HEADER,
    EXPORT_TOTAL_HEADER,
    MAIN_PROFILE_HEADER,
]
