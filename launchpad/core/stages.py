# Launch stages rendered by the presentation host

# Splash / loading. Initial stage; the push-permission prompt overlays it.
BOOTING = "BOOTING"

# Remote web experience. Carries a destination URL.
WEB_EXPERIENCE = "WEB_EXPERIENCE"

# Native cooking UI. Absorbing: nothing routes out of it for this launch.
CLASSIC_FLOW = "CLASSIC_FLOW"

# Shown in Remote mode when connectivity drops; re-routed on restore.
OFFLINE_SCREEN = "OFFLINE_SCREEN"

ALL_STAGES = (BOOTING, WEB_EXPERIENCE, CLASSIC_FLOW, OFFLINE_SCREEN)


# Persisted app modes (sticky across launches)

# Native UI was chosen; every later attribution event goes straight to CLASSIC_FLOW.
MODE_CLASSIC = "Classic"

# Remote config resolved a destination at least once ("HenView").
MODE_REMOTE = "Remote"

ALL_MODES = (MODE_CLASSIC, MODE_REMOTE)


# Connectivity signals
CONNECTIVITY_LOST = "lost"
CONNECTIVITY_RESTORED = "restored"
