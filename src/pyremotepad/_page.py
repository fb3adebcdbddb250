"""Browser joystick page served at ``/`` by the HTTP control server."""

CONTROL_PAGE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1, user-scalable=no">
<title>Remote Pad</title>
<style>
  html, body { margin: 0; height: 100%; background: #1d1f24; color: #e8e8e8;
               font-family: sans-serif; touch-action: none; user-select: none; }
  main { display: flex; height: 100%; align-items: center; justify-content: space-around; }
  #pad { position: relative; width: 180px; height: 180px; border-radius: 50%;
         background: #2f333b; border: 2px solid #4a4f5a; }
  #stick { position: absolute; left: 60px; top: 60px; width: 60px; height: 60px;
           border-radius: 50%; background: #7aa2f7; }
  #interact { width: 110px; height: 110px; border-radius: 50%; border: none;
              background: #e0af68; color: #1d1f24; font-size: 18px; font-weight: bold; }
  #status { position: fixed; top: 8px; left: 8px; font-size: 12px; opacity: 0.7; }
</style>
</head>
<body>
<div id="status">idle</div>
<main>
  <div id="pad"><div id="stick"></div></div>
  <button id="interact">ACT</button>
</main>
<script>
(function () {
  var pad = document.getElementById("pad");
  var stick = document.getElementById("stick");
  var status = document.getElementById("status");
  var radius = 90;
  var state = { x: 0, y: 0, interact: false };
  var active = false;
  var heartbeat = null;

  function send() {
    var body = JSON.stringify({ joystickX: state.x, joystickY: state.y, interact: state.interact });
    state.interact = false;
    fetch("/control", { method: "POST", headers: { "Content-Type": "application/json" }, body: body })
      .then(function (r) { status.textContent = r.ok ? "connected" : "error " + r.status; })
      .catch(function () { status.textContent = "offline"; });
  }

  function place(dx, dy) {
    var len = Math.sqrt(dx * dx + dy * dy);
    if (len > radius) { dx = dx / len * radius; dy = dy / len * radius; }
    stick.style.left = (60 + dx) + "px";
    stick.style.top = (60 + dy) + "px";
    state.x = Math.round(dx / radius * 100) / 100;
    state.y = Math.round(-dy / radius * 100) / 100;
  }

  function move(ev) {
    var rect = pad.getBoundingClientRect();
    var point = ev.touches ? ev.touches[0] : ev;
    place(point.clientX - rect.left - radius, point.clientY - rect.top - radius);
  }

  function begin(ev) {
    ev.preventDefault();
    active = true;
    move(ev);
    send();
    if (heartbeat === null) { heartbeat = setInterval(send, 100); }
  }

  function end(ev) {
    if (!active) { return; }
    ev.preventDefault();
    active = false;
    clearInterval(heartbeat);
    heartbeat = null;
    place(0, 0);
    send();
  }

  pad.addEventListener("touchstart", begin);
  pad.addEventListener("touchmove", function (ev) { if (active) { ev.preventDefault(); move(ev); } });
  pad.addEventListener("touchend", end);
  pad.addEventListener("mousedown", begin);
  window.addEventListener("mousemove", function (ev) { if (active) { move(ev); } });
  window.addEventListener("mouseup", end);

  document.getElementById("interact").addEventListener("click", function () {
    state.interact = true;
    send();
  });
})();
</script>
</body>
</html>
"""
