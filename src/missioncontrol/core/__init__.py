# MissionControl
# Copyright © 2025 The MissionControl Authors
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Domain models and process-level infrastructure."""
