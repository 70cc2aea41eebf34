#!/usr/bin/env python3
import importlib, sys, traceback

def ok(msg): print("[OK] " + msg)
def fail(msg): print("[FAIL] " + msg); sys.exit(1)

for module, hint in (
    ("numpy", "pip install numpy"),
    ("cv2", "pip install opencv-python-headless"),
    ("sklearn", "pip install scikit-learn"),
    ("fastapi", "pip install fastapi"),
    ("requests", "pip install requests"),
):
    try:
        importlib.import_module(module)
        ok(f"{module} import is available")
    except Exception:
        traceback.print_exc()
        fail(f"{module} not available. Install via: {hint}")

print("\nEnvironment check passed ✅")
