from __future__ import annotations

# Channel-voice command nibbles (high nibble of the status byte)
NOTE_OFF = 0x8
NOTE_ON = 0x9
KEY_AFTERTOUCH = 0xA
CONTROL_CHANGE = 0xB
CHANNEL_MODE = 0xB  # channel mode shares the control change status
PROGRAM_CHANGE = 0xC
CHANNEL_AFTERTOUCH = 0xD
PITCH_BEND = 0xE

NUM_CHANNELS = 16

# Controllers used by the parameter protocol
CC_DATA_ENTRY_MSB = 0x06
CC_DATA_ENTRY_LSB = 0x26
CC_DATA_INCREMENT = 0x60
CC_DATA_DECREMENT = 0x61
CC_NRPN_MSB = 0x63
CC_NRPN_LSB = 0x62
CC_RPN_MSB = 0x65
CC_RPN_LSB = 0x64
RPN_NULL = 0x7F

MAX_CONTROLLER = 119

CONTROL_CHANGE_MESSAGES: dict[str, int] = {
    "bankselectcoarse": 0,
    "modulationwheelcoarse": 1,
    "breathcontrollercoarse": 2,
    "footcontrollercoarse": 4,
    "portamentotimecoarse": 5,
    "dataentrycoarse": 6,
    "volumecoarse": 7,
    "balancecoarse": 8,
    "pancoarse": 10,
    "expressioncoarse": 11,
    "effectcontrol1coarse": 12,
    "effectcontrol2coarse": 13,
    "generalpurposeslider1": 16,
    "generalpurposeslider2": 17,
    "generalpurposeslider3": 18,
    "generalpurposeslider4": 19,
    "bankselectfine": 32,
    "modulationwheelfine": 33,
    "breathcontrollerfine": 34,
    "footcontrollerfine": 36,
    "portamentotimefine": 37,
    "dataentryfine": 38,
    "volumefine": 39,
    "balancefine": 40,
    "panfine": 42,
    "expressionfine": 43,
    "effectcontrol1fine": 44,
    "effectcontrol2fine": 45,
    "holdpedal": 64,
    "portamento": 65,
    "sustenutopedal": 66,
    "softpedal": 67,
    "legatopedal": 68,
    "hold2pedal": 69,
    "soundvariation": 70,
    "resonance": 71,
    "soundreleasetime": 72,
    "soundattacktime": 73,
    "brightness": 74,
    "soundcontrol6": 75,
    "soundcontrol7": 76,
    "soundcontrol8": 77,
    "soundcontrol9": 78,
    "soundcontrol10": 79,
    "generalpurposebutton1": 80,
    "generalpurposebutton2": 81,
    "generalpurposebutton3": 82,
    "generalpurposebutton4": 83,
    "reverblevel": 91,
    "tremololevel": 92,
    "choruslevel": 93,
    "celestelevel": 94,
    "phaserlevel": 95,
    "databuttonincrement": 96,
    "databuttondecrement": 97,
    "nonregisteredparametercoarse": 98,
    "nonregisteredparameterfine": 99,
    "registeredparametercoarse": 100,
    "registeredparameterfine": 101,
}

# Registered parameters: (CC#101 value, CC#100 value)
REGISTERED_PARAMETERS: dict[str, tuple[int, int]] = {
    "pitchbendrange": (0x00, 0x00),
    "channelfinetuning": (0x00, 0x01),
    "channelcoarsetuning": (0x00, 0x02),
    "tuningprogram": (0x00, 0x03),
    "tuningbank": (0x00, 0x04),
    "modulationrange": (0x00, 0x05),
    # Three-dimensional sound controllers
    "azimuthangle": (0x3D, 0x00),
    "elevationangle": (0x3D, 0x01),
    "gain": (0x3D, 0x02),
    "distanceratio": (0x3D, 0x03),
    "maximumdistance": (0x3D, 0x04),
    "maximumdistancegain": (0x3D, 0x05),
    "referencedistanceratio": (0x3D, 0x06),
    "panspreadangle": (0x3D, 0x07),
    "rollangle": (0x3D, 0x08),
}

CHANNEL_MODE_MESSAGES: dict[str, int] = {
    "allsoundoff": 120,
    "resetallcontrollers": 121,
    "localcontrol": 122,
    "allnotesoff": 123,
    "omnimodeoff": 124,
    "omnimodeon": 125,
    "monomodeon": 126,
    "polymodeon": 127,
}

MIN_CHANNEL_MODE = 120
MAX_CHANNEL_MODE = 127
