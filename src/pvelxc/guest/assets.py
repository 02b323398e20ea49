"""Files and package lists placed into the guest.

Templates are rendered with jinja2; everything here is deterministic for a
given configuration so re-running overwrites guest files with identical
content.
"""

BASE_PACKAGES = [
    "curl", "wget", "git", "vim", "nano", "htop", "bash", "bash-completion",
    "shadow", "util-linux", "coreutils", "findutils", "grep", "sed", "gawk",
    "ca-certificates", "openssl", "python3", "py3-pip", "openssh", "mosh",
    "dropbear", "ansible", "tzdata", "sudo", "jq", "tree", "ncurses",
    "fontconfig", "terminus-font", "figlet", "iproute2",
]

DOCKER_PACKAGES = ["docker", "docker-cli", "docker-compose"]

ROOT_HOME = "/opt"
SSHD_CONFIG = "/etc/ssh/sshd_config"
PROMPT_PATH = "/etc/profile.d/custom-prompt.sh"
MOTD_PATH = "/etc/profile.d/00-motd.sh"
BASHRC_PATH = f"{ROOT_HOME}/.bashrc"
THEME_PATH = f"{ROOT_HOME}/atomic.omp.json"
TERM_EXPORT = "export TERM=xterm-256color"

OH_MY_POSH_URL = "https://github.com/JanDeDobbeleer/oh-my-posh/releases/latest/download/posh-linux-amd64"
OH_MY_POSH_PATH = "/usr/local/bin/oh-my-posh"
FONT_DIR = "/usr/share/fonts/nerd-fonts"
NERD_FONTS = {
    "JetBrains Mono": "https://github.com/ryanoasis/nerd-fonts/releases/latest/download/JetBrainsMono.tar.xz",
    "Symbols": "https://github.com/ryanoasis/nerd-fonts/releases/latest/download/NerdFontsSymbolsOnly.tar.xz",
}

PROMPT_SCRIPT = r"""#!/bin/bash
# Custom prompt for Alpine container

# Colors
RED='\[\033[0;31m\]'
GREEN='\[\033[0;32m\]'
YELLOW='\[\033[1;33m\]'
BLUE='\[\033[0;34m\]'
PURPLE='\[\033[0;35m\]'
CYAN='\[\033[0;36m\]'
WHITE='\[\033[1;37m\]'
RESET='\[\033[0m\]'

if [ "$EUID" -eq 0 ]; then
    PS1="${RED}╭─${RESET}${CYAN}[${HOSTNAME}]${RESET} ${YELLOW}\w${RESET}\n${RED}╰─${RESET}${RED}#${RESET} "
else
    PS1="${GREEN}╭─${RESET}${CYAN}[\u@\h]${RESET} ${YELLOW}\w${RESET}\n${GREEN}╰─${RESET}${GREEN}\$${RESET} "
fi

# Terminal title
case "$TERM" in
xterm*|rxvt*|screen*)
    PS1="\[\e]0;\u@\h: \w\a\]$PS1"
    ;;
*)
    ;;
esac

export PS1
"""

BASHRC = """\
# .bashrc for root

# Source global definitions
if [ -f /etc/profile ]; then
    . /etc/profile
fi

# Custom aliases
alias ll='ls -la'
alias l='ls -CF'
alias ..='cd ..'
alias docker-compose='docker compose'

# Set default editor
export EDITOR={{ editor }}
"""

MOTD_SCRIPT = r"""#!/bin/sh

# Clear default MOTD
> /etc/motd

HOSTNAME=$(hostname)
LAN_IP=$(ip -4 addr show {{ interface }} 2>/dev/null | grep -oP '(?<=inet\s)\d+(\.\d+){3}' | head -n1)
TAILSCALE_STATUS=$(tailscale status 2>/dev/null | head -n1)
TAILSCALE_HOSTNAME=$(tailscale status --json 2>/dev/null | jq -r '.Self.DNSName // empty' 2>/dev/null | sed 's/\.$//')

echo
figlet -f slant "$HOSTNAME" 2>/dev/null || echo "$HOSTNAME"
echo
echo "🖥️  System Information"
echo "━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━"
echo "📍 LAN IP Address:      ${LAN_IP:-Not assigned}"
echo "🌐 Tailscale Hostname:  ${TAILSCALE_HOSTNAME:-Not connected}"
echo "🔗 Tailscale Status:    ${TAILSCALE_STATUS:-Tailscale not connected}"
echo "━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━"
echo
"""

# Pushed verbatim: the {{ }} segments belong to Oh My Posh, not jinja2
OH_MY_POSH_THEME = """\
{
  "$schema": "https://raw.githubusercontent.com/JanDeDobbeleer/oh-my-posh/main/themes/schema.json",
  "blocks": [
    {
      "alignment": "left",
      "segments": [
        {
          "background": "#0077c2",
          "foreground": "#ffffff",
          "leading_diamond": "╭─",
          "style": "diamond",
          "template": " {{ .Name }} ",
          "type": "shell"
        },
        {
          "background": "#FF9248",
          "foreground": "#2d3436",
          "powerline_symbol": "",
          "properties": {
            "style": "folder"
          },
          "style": "powerline",
          "template": " {{ .Path }} ",
          "type": "path"
        }
      ],
      "type": "prompt"
    },
    {
      "alignment": "left",
      "newline": true,
      "segments": [
        {
          "foreground": "#21c7c7",
          "style": "plain",
          "template": "╰─",
          "type": "text"
        },
        {
          "foreground": "#e0f8ff",
          "foreground_templates": ["{{ if gt .Code 0 }}#ef5350{{ end }}"],
          "properties": {
            "always_enabled": true
          },
          "style": "plain",
          "template": "❯ ",
          "type": "status"
        }
      ],
      "type": "prompt"
    }
  ],
  "version": 3
}
"""

RULE = "━" * 63

REPORT = """\
{{ rule }}
🎉 Alpine LXC Container Creation Report
{{ rule }}
📅 Timestamp: {{ timestamp }}
🏷️  Hostname: {{ config.hostname }}
🆔 VMID: {{ vmid }}

📊 Resource Configuration:
{{ rule }}
💻 CPU Cores: {{ config.cpu }}
🧠 RAM: {{ config.ram }}MB
💾 Swap: {{ config.swap }}MB
💿 Disk Size: {{ config.disk }}GB
🗄️  Storage Pool: {{ config.storage }}
🌐 Network Bridge: {{ config.bridge }}
📍 Container IP: {{ container_ip }}

📦 Installed Packages:
{{ rule }}
{% for feature in features -%}
{{ "✅" if feature.ok else "⚠️ " }} {{ feature.label }}
{% endfor %}
🔧 Configuration Status:
{{ rule }}
{% for check in checks -%}
{{ "✅" if check.ok else "⚠️ " }} {{ check.label }}
{% endfor -%}
{{ "✅" if ssh_key.ok else "⚠️ " }} SSH public key installed: {{ "Yes" if ssh_key.installed else "No" }}
{% if warnings %}
⚠️  Completed with warnings:
{{ rule }}
{% for outcome in warnings -%}
- {{ outcome.name }}: {{ outcome.reason }}
{% endfor %}
{%- endif %}
📋 Default Alpine Packages:
{{ rule }}
{% for package in packages -%}
{{ package }}
{% endfor -%}
... and more

🚀 Next Steps:
{{ rule }}
1. Connect to container: pct enter {{ vmid }}
2. Configure Tailscale: tailscale up
3. Start using Docker: docker run hello-world
4. SSH access: ssh root@{{ ssh_host }}

{% if warnings -%}
Container created with {{ warnings | length }} warning(s). ⚠️
{%- else -%}
Container created successfully! 🎉
{%- endif %}
{{ rule }}
"""
