"""
Category: Services
Background services that can be disabled without breaking the desktop.
"""

from __future__ import annotations

from models import Action, ServiceDisable

key = "services"
title_ref = "category.services.title"
description_ref = "category.services.description"

actions = (
    Action("services.diagnostics", "action.services.diagnostics.title",
           "action.services.diagnostics.description",
           ServiceDisable(("DiagTrack", "diagnosticshub.standardcollector.service", "DoSvc"))),
    Action("services.sysmain", "action.services.sysmain.title",
           "action.services.sysmain.description", ServiceDisable(("SysMain",))),
    Action("services.search", "action.services.search.title",
           "action.services.search.description", ServiceDisable(("WSearch",)),
           recommended=False),
    Action("services.remoteRegistry", "action.services.remoteRegistry.title",
           "action.services.remoteRegistry.description", ServiceDisable(("RemoteRegistry",))),
    Action("services.errorReporting", "action.services.errorReporting.title",
           "action.services.errorReporting.description", ServiceDisable(("WerSvc",))),
)
