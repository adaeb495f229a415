"""
Category: System Files Cleanup
Temp folders, system logs, crash dumps, the Recycle Bin and Defender scan history.
"""

from __future__ import annotations

from models import Action, CommandSequence

key = "cleanup.systemFiles"
title_ref = "category.cleanup.systemFiles.title"
description_ref = "category.cleanup.systemFiles.description"

TEMP_FILES = (
    r'del /f /s /q "%SystemRoot%\Temp\*" >nul 2>&1',
    r'del /f /s /q "%SystemDrive%\Windows\Temp\*" >nul 2>&1',
    r'del /f /s /q "%TEMP%\*" >nul 2>&1',
)

LOGS = (
    r'del /f /s /q "%SystemRoot%\Logs\*" >nul 2>&1',
    r'del /f /s /q "%ProgramData%\Microsoft\Windows\WER\ReportQueue\*" >nul 2>&1',
    r'del /f /s /q "%ProgramData%\Microsoft\Diagnosis\*" >nul 2>&1',
)

CRASH_DUMPS = (
    r'del /f /s /q "%SystemRoot%\Minidump\*.dmp" >nul 2>&1',
    r'del /f /q "%SystemRoot%\memory.dmp" >nul 2>&1',
    r'del /f /s /q "%SystemDrive%\*.dmp" >nul 2>&1',
)

RECYCLE_BIN = (
    r'rd /s /q "%SystemDrive%\$Recycle.bin" >nul 2>&1',
)

DEFENDER = (
    r'del /f /s /q "%ProgramData%\Microsoft\Windows Defender\Scans\*" >nul 2>&1',
)

actions = (
    Action("cleanup.tempFiles", "action.cleanup.tempFiles.title",
           "action.cleanup.tempFiles.description", CommandSequence(TEMP_FILES)),
    Action("cleanup.logs", "action.cleanup.logs.title",
           "action.cleanup.logs.description", CommandSequence(LOGS)),
    Action("cleanup.crashDumps", "action.cleanup.crashDumps.title",
           "action.cleanup.crashDumps.description", CommandSequence(CRASH_DUMPS)),
    Action("cleanup.recycleBin", "action.cleanup.recycleBin.title",
           "action.cleanup.recycleBin.description", CommandSequence(RECYCLE_BIN)),
    Action("cleanup.defender", "action.cleanup.defender.title",
           "action.cleanup.defender.description", CommandSequence(DEFENDER),
           recommended=False),
)
