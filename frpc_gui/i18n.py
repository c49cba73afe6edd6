"""UI strings for the two supported languages."""

STRINGS = {
    "en": {
        "status": "Status",
        "config": "Config",
        "settings": "Settings",
        "server_addr": "Server Address",
        "server_port": "Server Port",
        "token": "Auth Token (Optional)",
        "tunnels": "Tunnels",
        "add_tunnel": "Add Tunnel",
        "name": "Name",
        "type": "Type",
        "local_ip": "Local IP",
        "local_port": "Local Port",
        "remote_port": "Remote Port",
        "custom_domain": "Custom Domain",
        "start": "START SERVICE",
        "stop": "STOP SERVICE",
        "running": "Service Active",
        "stopped": "Service Inactive",
        "connecting": "Connecting...",
        "waiting": "Waiting for server...",
        "connected": "Connected to server",
        "ready": "Ready to connect",
        "logs": "System Logs",
        "clear_logs": "CLEAR LOGS",
        "no_tunnels": "No tunnels configured",
        "language": "Language",
        "remote_addr": "Remote Address",
        "copy": "COPY",
        "delete": "DELETE",
        "confirm_delete": "Delete tunnel {name}?",
        "err_required": "Required",
        "err_invalid_port": "Invalid port (1-65535)",
        "err_domain_required": "Domain is required for HTTP/HTTPS",
        "no_logs": "Waiting for logs...",
        "menu_file": "File",
        "menu_service": "Service",
        "menu_view": "View",
        "import_profile": "Import Profile",
        "export_profile": "Export Profile",
        "recent_profiles": "Recent Profiles",
        "no_recent": "No recent profiles",
        "export_ini": "Export frpc.ini",
        "select_binary": "Select frpc Binary",
        "exit": "Exit",
        "menu_start": "Start",
        "menu_stop": "Stop",
        "menu_clear_logs": "Clear Logs",
        "confirm_quit": "frpc is running. Stop it and quit?",
    },
    "zh": {
        "status": "状态概览",
        "config": "配置管理",
        "settings": "通用设置",
        "server_addr": "服务器地址",
        "server_port": "服务器端口",
        "token": "连接令牌 (Token)",
        "tunnels": "穿透隧道",
        "add_tunnel": "添加隧道",
        "name": "名称",
        "type": "类型",
        "local_ip": "本地地址",
        "local_port": "本地端口",
        "remote_port": "远程端口",
        "custom_domain": "自定义域名",
        "start": "启动服务",
        "stop": "停止服务",
        "running": "服务运行中",
        "stopped": "服务已停止",
        "connecting": "正在连接...",
        "waiting": "等待服务器响应...",
        "connected": "已连接到服务器",
        "ready": "等待连接",
        "logs": "系统日志",
        "clear_logs": "清空日志",
        "no_tunnels": "暂无隧道配置",
        "language": "界面语言",
        "remote_addr": "远程访问地址",
        "copy": "复制",
        "delete": "删除",
        "confirm_delete": "确定删除隧道 {name}？",
        "err_required": "必填项",
        "err_invalid_port": "端口无效 (1-65535)",
        "err_domain_required": "HTTP/HTTPS 需要填写域名",
        "no_logs": "等待日志输出...",
        "menu_file": "文件",
        "menu_service": "服务",
        "menu_view": "视图",
        "import_profile": "导入配置",
        "export_profile": "导出配置",
        "recent_profiles": "最近的配置",
        "no_recent": "暂无最近的配置",
        "export_ini": "导出 frpc.ini",
        "select_binary": "选择 frpc 程序",
        "exit": "退出",
        "menu_start": "启动",
        "menu_stop": "停止",
        "menu_clear_logs": "清空日志",
        "confirm_quit": "frpc 正在运行，停止并退出？",
    },
}


def translate(key: str, language: str = "en", **kwargs) -> str:
    text = STRINGS.get(language, STRINGS["en"]).get(key) or STRINGS["en"].get(key, key)
    return text.format(**kwargs) if kwargs else text


def other_language(language: str) -> str:
    return "zh" if language == "en" else "en"
